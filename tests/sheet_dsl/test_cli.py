from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from controlsheet.sheet_dsl.cli import entrypoint, main
from controlsheet.sheet_dsl.errors import ControlSheetError, ControlSheetErrorCode, EmptyContainerError


def write_sheet(tmp_path: Path) -> Path:
    (tmp_path / "controls.csv").write_text(
        "id,label,max\nalpha,Alpha,10\nbeta,,\n", encoding="utf-8"
    )
    sheet_path = tmp_path / "sheet.json"
    sheet_path.write_text(
        json.dumps(
            {
                "container": {"name": "weights"},
                "defaults": {"min": 0, "max": 1, "value": 0.5, "step": 0.1},
                "controls": "@file:controls.csv",
            }
        ),
        encoding="utf-8",
    )
    return sheet_path


def test_cli_writes_json(tmp_path: Path) -> None:
    sheet_path = write_sheet(tmp_path)
    out_path = tmp_path / "container.json"

    exit_code = main([str(sheet_path), "--out", str(out_path)])

    assert exit_code == 0
    payload = json.loads(out_path.read_text(encoding="utf-8"))
    assert payload["name"] == "weights"
    assert [c["id"] for c in payload["controls"]] == ["alpha", "beta"]
    assert payload["controls"][1] == {
        "id": "beta",
        "label": "beta",
        "kind": "slider",
        "options": {"min": 0, "max": 1, "value": 0.5, "step": 0.1},
    }


def test_cli_writes_jsonl_with_default_overrides(tmp_path: Path) -> None:
    sheet_path = write_sheet(tmp_path)
    out_path = tmp_path / "controls.jsonl"

    exit_code = main([
        str(sheet_path),
        "--out",
        str(out_path),
        "--format",
        "jsonl",
        "--default",
        "value=0.2",
        "--default",
        "step=null",
    ])

    assert exit_code == 0
    lines = out_path.read_text(encoding="utf-8").strip().splitlines()
    first = json.loads(lines[0])
    second = json.loads(lines[1])
    assert first["options"] == {"min": 0, "max": 10.0, "value": 0.2}
    assert second["options"] == {"min": 0, "max": 1, "value": 0.2}


def test_cli_writes_csv(tmp_path: Path) -> None:
    sheet_path = write_sheet(tmp_path)
    out_path = tmp_path / "controls.csv.out"

    exit_code = main([str(sheet_path), "--out", str(out_path), "--format", "csv", "--name", "panel"])

    assert exit_code == 0
    frame = pd.read_csv(out_path)
    assert list(frame.columns) == ["id", "label", "kind", "min", "max", "value", "step"]
    assert frame["label"].tolist() == ["Alpha", "beta"]


def test_cli_prints_with_limit(tmp_path: Path, capsys) -> None:
    sheet_path = write_sheet(tmp_path)

    exit_code = main([str(sheet_path), "--limit", "1"])

    assert exit_code == 0
    out = capsys.readouterr().out.strip().splitlines()
    assert json.loads(out[0])["id"] == "alpha"
    assert out[1] == "... truncated 1 controls"


def test_cli_allow_empty_flag(tmp_path: Path) -> None:
    csv_path = tmp_path / "empty.csv"
    csv_path.write_text("id,label\n", encoding="utf-8")

    with pytest.raises(EmptyContainerError):
        main([str(csv_path)])

    out_path = tmp_path / "empty.json"
    assert main([str(csv_path), "--allow-empty", "--out", str(out_path)]) == 0
    assert json.loads(out_path.read_text(encoding="utf-8")) == {"name": "empty", "controls": []}


def test_cli_rejects_malformed_default(tmp_path: Path) -> None:
    sheet_path = write_sheet(tmp_path)

    with pytest.raises(ControlSheetError) as exc:
        main([str(sheet_path), "--default", "value"])

    assert exc.value.code is ControlSheetErrorCode.INVALID_CONFIG


def test_cli_rejects_unparseable_default_value(tmp_path: Path) -> None:
    sheet_path = write_sheet(tmp_path)

    with pytest.raises(ControlSheetError) as exc:
        main([str(sheet_path), "--default", "value=["])

    assert exc.value.code is ControlSheetErrorCode.INVALID_CONFIG
    assert exc.value.ctx["value"] == "value=["


def test_cli_rejects_unknown_output_suffix(tmp_path: Path) -> None:
    sheet_path = write_sheet(tmp_path)
    out_path = tmp_path / "out.txt"

    with pytest.raises(ControlSheetError) as exc:
        main([str(sheet_path), "--out", str(out_path)])

    assert exc.value.ctx == {"error": "unsupported output format", "format": "txt"}
    assert not out_path.exists()


@pytest.mark.parametrize(
    "extra,fragment",
    [
        (["--default", "value=["], "INVALID_CONFIG"),
        (["--out", "out.txt"], "unsupported output format"),
    ],
)
def test_entrypoint_reports_errors_as_exit_message(tmp_path: Path, monkeypatch, extra, fragment) -> None:
    sheet_path = write_sheet(tmp_path)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("sys.argv", ["controlsheet", str(sheet_path), *extra])

    with pytest.raises(SystemExit) as exc:
        entrypoint()

    message = str(exc.value.code)
    assert message.startswith("error: INVALID_CONFIG")
    assert fragment in message
