# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Read and write JSON asset manifests exchanged with the bundler."""

import json
import logging
from typing import Any

from hoisting.estree import is_node
from hoisting.model import Asset, HoistResult

logger = logging.getLogger(__name__)


class ManifestError(RuntimeError):
    """Represent a malformed asset manifest."""


def load_asset(text: str) -> Asset:
    """Decode an asset manifest.

    The manifest holds ``id``, ``dependencies`` and the ESTree ``program``
    produced by the parser.

    Args:
        text: Manifest JSON text.

    Returns:
        Asset ready for hoisting.

    Raises:
        ManifestError: If the JSON or any required field is invalid.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Invalid manifest JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ManifestError("Manifest must be a JSON object")

    asset_id = payload.get("id")
    if not isinstance(asset_id, int) or isinstance(asset_id, bool):
        raise ManifestError("Manifest id must be an integer")

    dependencies = payload.get("dependencies", [])
    if not isinstance(dependencies, list) or not all(
        isinstance(item, str) for item in dependencies
    ):
        raise ManifestError("Manifest dependencies must be a list of strings")

    program = payload.get("program")
    if not is_node(program) or program["type"] != "Program":
        raise ManifestError("Manifest program must be an ESTree Program node")

    return Asset(id=asset_id, program=program, dependencies=frozenset(dependencies))


def dump_asset(asset: Asset, result: HoistResult) -> str:
    """Encode a hoisted asset and its placeholders for the packager.

    Args:
        asset: Hoisted asset.
        result: Hoisting outcome for the asset.

    Returns:
        Manifest JSON text.
    """
    substitution = result.substitution
    payload: dict[str, Any] = {
        "id": asset.id,
        "dependencies": sorted(asset.dependencies),
        "isAstDirty": asset.is_ast_dirty,
        "wrapped": result.decision.should_wrap,
        "wrapReason": result.decision.reason,
        "exportsName": result.exports_name,
        "placeholders": {
            "require": substitution.require_placeholders,
            "requireResolve": substitution.require_resolve_placeholders,
            "unresolved": sorted(set(substitution.unresolved_requires)),
        },
        "program": asset.program,
    }
    return json.dumps(payload, indent=2) + "\n"
