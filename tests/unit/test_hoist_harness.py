# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the hoist CLI harness."""

import io
import json
import re
from pathlib import Path

from cli.hoist_harness import run

from js_trees import assign, call, dotted, function_expr, lit, ret, script, stmt


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _write_manifest(path: Path, asset_id: int, program: dict) -> None:
    _write_file(
        path,
        json.dumps({"id": asset_id, "dependencies": [], "program": program}),
    )


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def test_hoist_801_cli_requires_input_and_output_arguments() -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run([], stdout=stdout, stderr=stderr)

    assert exit_code == 2


def test_hoist_802_cli_fails_when_input_path_is_missing(tmp_path: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["--input", str(tmp_path / "missing"), "--output", str(tmp_path / "out")],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Input path does not exist" in stderr.getvalue()


def test_hoist_803_cli_fails_when_output_is_non_empty(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    output_path = tmp_path / "output"
    input_path.mkdir()
    _write_file(output_path / "existing.txt", "hello")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["--input", str(input_path), "--output", str(output_path)],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Output path must be empty" in stderr.getvalue()


def test_hoist_804_cli_fails_when_input_and_output_overlap(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    input_path.mkdir()
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["--input", str(input_path), "--output", str(input_path / "out")],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "must not overlap" in stderr.getvalue()


def test_hoist_805_cli_hoists_manifests_into_output(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    output_path = tmp_path / "output"
    _write_manifest(
        input_path / "lib" / "three.json",
        3,
        script(stmt(assign(dotted("module.exports"), function_expr([ret(lit(1))])))),
    )
    _write_manifest(input_path / "four.json", 4, script(stmt(call("eval", lit("x")))))
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["--input", str(input_path), "--output", str(output_path)],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert stderr.getvalue() == ""
    flattened = json.loads((output_path / "lib" / "three.json").read_text(encoding="utf-8"))
    assert flattened["isAstDirty"] is True
    assert flattened["wrapped"] is False
    body = flattened["program"]["body"]
    assert body[0]["declarations"][0]["id"]["name"] == "$3$exports"
    assert body[1]["expression"]["left"]["name"] == "$3$exports"
    wrapped = json.loads((output_path / "four.json").read_text(encoding="utf-8"))
    assert wrapped["wrapped"] is True
    assert wrapped["wrapReason"] == "eval"
    assert len(wrapped["program"]["body"]) == 1
    output = _strip_ansi(stdout.getvalue())
    assert "hoist:done" in output
    assert "assets_flattened=1" in output
    assert "assets_wrapped=1" in output
    assert "assets=2" in output
    assert "status=success" in output


def test_hoist_806_cli_rejects_duplicate_asset_ids(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    output_path = tmp_path / "output"
    _write_manifest(input_path / "a.json", 7, script())
    _write_manifest(input_path / "nested" / "b.json", 7, script())
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["--input", str(input_path), "--output", str(output_path)],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "nested/b.json: asset id 7 already used by a.json" in stderr.getvalue()
    assert (output_path / "a.json").exists()
    assert not (output_path / "nested" / "b.json").exists()


def test_hoist_807_cli_fails_on_malformed_manifest(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    output_path = tmp_path / "output"
    _write_file(input_path / "broken.json", '{"id": "x"}')
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["--input", str(input_path), "--output", str(output_path)],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Hoist failed" in stderr.getvalue()
    assert "broken.json" in stderr.getvalue()
