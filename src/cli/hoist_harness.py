# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Hoist a directory of JSON asset manifests into bundle-ready trees."""

import argparse
import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from hoisting import (
    Asset,
    HoistError,
    HoistResult,
    ManifestError,
    dump_asset,
    hoist_asset,
    load_asset,
)
from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger(__name__)

MANIFEST_SUFFIX = ".json"
EXIT_OK = 0
EXIT_FAILURE = 2


class UsageError(RuntimeError):
    """Represent unusable input or output directories."""


class BatchError(RuntimeError):
    """Represent a manifest that stops the batch."""


@dataclass
class BatchTally:
    """Accumulate per-asset outcomes of one hoisting batch."""

    flattened: int = 0
    wrapped: int = 0
    substitutions: int = 0
    bindings_renamed: int = 0
    unresolved_requires: int = 0
    seen_ids: dict[int, str] = field(default_factory=dict)

    def record(self, result: HoistResult) -> None:
        if result.decision.should_wrap:
            self.wrapped += 1
        else:
            self.flattened += 1
        self.substitutions += result.substitution.substitutions
        self.bindings_renamed += result.bindings_renamed
        self.unresolved_requires += len(result.substitution.unresolved_requires)

    def as_fields(self, elapsed_ms: int) -> dict[str, int]:
        return {
            "assets": self.flattened + self.wrapped,
            "assets_flattened": self.flattened,
            "assets_wrapped": self.wrapped,
            "substitutions": self.substitutions,
            "bindings_renamed": self.bindings_renamed,
            "unresolved_requires": self.unresolved_requires,
            "elapsed_ms": elapsed_ms,
        }


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hoist",
        description="Flatten or wrap CommonJS asset trees for bundle concatenation.",
    )
    parser.add_argument("--input", required=True, help="Directory of asset manifests.")
    parser.add_argument("--output", required=True, help="Empty directory for results.")
    parser.add_argument(
        "--verbose", action="store_true", help="Log every hoisting decision."
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run the hoist command against one manifest directory.

    Args:
        argv: CLI arguments.
        stdout: Stream receiving phase markers and the summary line.
        stderr: Stream receiving failure messages.

    Returns:
        Exit code.
    """
    try:
        args = build_parser().parse_args(argv)
    except SystemExit:
        logger.warning("Argument parsing failed (argv=%s)", argv)
        return EXIT_FAILURE
    if args.verbose:
        logging.getLogger("hoisting").setLevel(logging.DEBUG)

    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print("validation:start")
    try:
        source_dir, target_dir = _resolve_directories(Path(args.input), Path(args.output))
    except UsageError as exc:
        logger.warning("Rejected directories (error=%s)", exc)
        stderr.write(f"{exc}\n")
        return EXIT_FAILURE
    console.print("validation:done")

    console.print("hoist:start")
    started = time.monotonic()
    tally = BatchTally()
    try:
        for manifest_path in _discover_manifests(source_dir):
            relative = manifest_path.relative_to(source_dir)
            _hoist_manifest(manifest_path, target_dir / relative, relative, tally)
    except BatchError as exc:
        logger.warning("Hoist failed (error=%s)", exc)
        stderr.write(f"Hoist failed: {exc}\n")
        return EXIT_FAILURE
    elapsed_ms = int(round((time.monotonic() - started) * 1000))
    console.print("hoist:done")

    summary = tally.as_fields(elapsed_ms)
    console.print(" ".join(f"{key}={value}" for key, value in summary.items()))
    console.print("status=success")
    return EXIT_OK


def _resolve_directories(source: Path, target: Path) -> tuple[Path, Path]:
    """Resolve the manifest and result directories.

    Args:
        source: Directory holding asset manifests.
        target: Directory receiving hoisted manifests; created when missing.

    Returns:
        Absolute source and target directories.

    Raises:
        UsageError: If the source is missing, the target is not empty, or one
            directory contains the other.
    """
    source, target = source.resolve(), target.resolve()
    if not source.is_dir():
        if source.exists():
            raise UsageError(f"Input path must be a directory: {source}")
        raise UsageError(f"Input path does not exist: {source}")
    if target.exists():
        if not target.is_dir():
            raise UsageError(f"Output path must be a directory: {target}")
        if next(target.iterdir(), None) is not None:
            raise UsageError(f"Output path must be empty: {target}")
    if source == target or source in target.parents or target in source.parents:
        raise UsageError("Input and output paths must not overlap")
    return source, target


def _discover_manifests(source_dir: Path) -> list[Path]:
    return sorted(
        path
        for path in source_dir.rglob(f"*{MANIFEST_SUFFIX}")
        if path.is_file()
    )


def _hoist_manifest(
    manifest_path: Path, destination: Path, relative: Path, tally: BatchTally
) -> None:
    """Hoist one manifest and write its result.

    Asset ids must be unique across the batch because every generated name
    is prefixed with the id.

    Args:
        manifest_path: Manifest to read.
        destination: Path receiving the hoisted manifest.
        relative: Manifest path relative to the input directory.
        tally: Batch counters updated with the outcome.

    Raises:
        BatchError: If the manifest cannot be read, decoded, hoisted or
            written, or reuses an asset id.
    """
    label = relative.as_posix()
    try:
        asset = load_asset(manifest_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ManifestError) as exc:
        raise BatchError(f"{label}: {exc}") from exc

    previous = tally.seen_ids.setdefault(asset.id, label)
    if previous != label:
        raise BatchError(f"{label}: asset id {asset.id} already used by {previous}")

    try:
        result = hoist_asset(asset)
    except HoistError as exc:
        raise BatchError(f"{label}: {exc}") from exc
    tally.record(result)
    _log_outcome(label, asset, result)

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(dump_asset(asset, result), encoding="utf-8")
    except OSError as exc:
        raise BatchError(f"{label}: {exc}") from exc


def _log_outcome(label: str, asset: Asset, result: HoistResult) -> None:
    if result.decision.should_wrap:
        logger.info(
            "Wrapped asset in module envelope (path=%s asset_id=%s reason=%s)",
            label,
            asset.id,
            result.decision.reason,
        )
    for specifier in result.substitution.unresolved_requires:
        logger.info("Unresolved require kept (path=%s specifier=%s)", label, specifier)


def main() -> None:
    """Run hoist CLI."""
    configure_logging()
    raise SystemExit(run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr))


if __name__ == "__main__":
    main()
