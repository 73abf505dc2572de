"""Command-line entry point for compiling control sheets."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable

import pandas as pd
import yaml

from controlsheet.sheet_dsl.compiler import compile_sheet
from controlsheet.sheet_dsl.errors import ControlSheetError, ControlSheetErrorCode
from controlsheet.sheet_dsl.loader import load_sheet
from controlsheet.sheet_dsl.models import ContainerConfig, ContainerDescriptor, ControlSheet

OUTPUT_FORMATS = ("json", "jsonl", "csv")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compile declarative control sheets")
    parser.add_argument("sheet", help="Path to sheet file (yaml, json or csv)")
    parser.add_argument("--out", help="Optional output path (json, jsonl or csv)")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, help="Output format override")
    parser.add_argument("--name", help="Container name override")
    parser.add_argument(
        "--allow-empty",
        action="store_true",
        default=None,
        help="Accept sheets with no control rows",
    )
    parser.add_argument(
        "--default",
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="Override a default option (may be repeated)",
    )
    parser.add_argument("--limit", type=int, help="Maximum controls to emit to stdout")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    out_path = Path(args.out) if args.out else None
    fmt = None
    if out_path is not None:
        fmt = args.format or out_path.suffix.lstrip(".") or "json"
        if fmt not in OUTPUT_FORMATS:
            raise ControlSheetError(
                ControlSheetErrorCode.INVALID_CONFIG,
                ctx={"error": "unsupported output format", "format": fmt},
            )

    sheet = _apply_overrides(load_sheet(args.sheet), args)
    container = compile_sheet(sheet)

    if out_path is not None:
        _write_container(container, out_path, fmt)
    else:
        limit = args.limit or len(container)
        for control in container.controls[:limit]:
            print(json.dumps(control.to_dict()))
        if limit < len(container):
            print(f"... truncated {len(container) - limit} controls")

    return 0


def _apply_overrides(sheet: ControlSheet, args: argparse.Namespace) -> ControlSheet:
    container = sheet.container
    if args.name or args.allow_empty is not None:
        container = ContainerConfig(
            name=args.name or container.name,
            allow_empty=container.allow_empty if args.allow_empty is None else args.allow_empty,
        )
    defaults = sheet.defaults.with_overrides(_parse_default_pairs(args.default))
    return replace(sheet, container=container, defaults=defaults)


def _parse_default_pairs(pairs: list[str] | None) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise ControlSheetError(
                ControlSheetErrorCode.INVALID_CONFIG,
                ctx={"error": "default must be KEY=VALUE", "value": pair},
            )
        key, raw = pair.split("=", 1)
        if not key:
            raise ControlSheetError(
                ControlSheetErrorCode.INVALID_CONFIG,
                ctx={"error": "default key missing", "value": pair},
            )
        # YAML scalars: "0.2" -> 0.2, "null" -> None, "true" -> True
        try:
            overrides[key.strip()] = yaml.safe_load(raw) if raw else None
        except yaml.YAMLError as exc:
            raise ControlSheetError(
                ControlSheetErrorCode.INVALID_CONFIG,
                ctx={"error": "default value must be a YAML scalar", "value": pair},
                cause=exc,
            )
    return overrides


def _write_container(container: ContainerDescriptor, out: Path, fmt: str) -> None:
    if fmt == "json":
        out.write_text(json.dumps(container.to_dict(), indent=2) + "\n", encoding="utf-8")
        return

    if fmt == "jsonl":
        with out.open("w", encoding="utf-8") as fh:
            for control in container.controls:
                fh.write(json.dumps(control.to_dict()) + "\n")
        return

    if fmt == "csv":
        records = []
        for control in container.controls:
            record: dict[str, Any] = {"id": control.id, "label": control.label, "kind": control.kind}
            for key, value in control.options.items():
                if isinstance(value, (list, tuple)):
                    value = "|".join(str(item) for item in value)
                record[key] = value
            records.append(record)
        frame = pd.DataFrame.from_records(records, columns=_csv_columns(records))
        frame.to_csv(out, index=False)
        return

    raise ControlSheetError(
        ControlSheetErrorCode.INVALID_CONFIG,
        ctx={"error": "unsupported output format", "format": fmt},
    )


def _csv_columns(records: list[dict[str, Any]]) -> list[str]:
    columns = ["id", "label", "kind"]
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)
    return columns


def entrypoint() -> None:
    try:
        raise SystemExit(main())
    except ControlSheetError as exc:
        raise SystemExit(f"error: {exc}")
