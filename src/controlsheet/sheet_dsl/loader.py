"""Sheet loader for the control sheet DSL."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import yaml

from controlsheet.sheet_dsl.errors import ControlSheetError, ControlSheetErrorCode
from controlsheet.sheet_dsl.models import ContainerConfig, ControlDefaults, ControlSheet
from controlsheet.sheet_dsl.tabular import read_csv_with_context, rows_from_frame

logger = logging.getLogger(__name__)

FILE_PREFIX = "@file:"
TOP_LEVEL_KEYS = {"container", "defaults", "controls"}


def _invalid(path: Path | None, error: str, **extra: Any) -> ControlSheetError:
    ctx: dict[str, Any] = {"path": str(path) if path else None, "error": error}
    ctx.update(extra)
    return ControlSheetError(ControlSheetErrorCode.INVALID_SHEET, ctx=ctx)


def _parse_structured(path: Path) -> Any:
    suffix = path.suffix.lower()
    try:
        raw = path.read_text(encoding="utf-8")
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(raw)
        if suffix == ".json":
            return json.loads(raw)
    except (UnicodeDecodeError, yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ControlSheetError(
            ControlSheetErrorCode.INVALID_SHEET,
            ctx={"path": str(path), "error": "unparseable sheet file"},
            cause=exc,
        )
    raise _invalid(path, "unsupported sheet extension")


def load_sheet(path: Path | str) -> ControlSheet:
    """Load a sheet file (YAML, JSON or bare CSV) into a :class:`ControlSheet`."""

    sheet_path = Path(path)
    if not sheet_path.is_file():
        raise _invalid(sheet_path, "sheet file not found")

    if sheet_path.suffix.lower() == ".csv":
        rows = rows_from_frame(read_csv_with_context(sheet_path))
        logger.debug("loaded %d control rows from %s", len(rows), sheet_path)
        return ControlSheet(
            rows=tuple(rows),
            container=ContainerConfig(name=sheet_path.stem),
            source=sheet_path,
        )

    data = _parse_structured(sheet_path)
    if data is None:
        data = {}
    return parse_sheet_mapping(data, source=sheet_path, base_dir=sheet_path.parent)


def parse_sheet_mapping(
    data: Any,
    *,
    source: Path | None = None,
    base_dir: Path | None = None,
) -> ControlSheet:
    """Build a :class:`ControlSheet` from an already-parsed mapping.

    ``base_dir`` anchors ``@file:`` references; it defaults to the source's
    directory, then the working directory.
    """

    if not isinstance(data, Mapping):
        raise _invalid(source, "top-level must be mapping")

    unknown = sorted(set(data) - TOP_LEVEL_KEYS)
    if unknown:
        raise _invalid(source, "unsupported sheet section", sections=tuple(unknown))

    if base_dir is None:
        base_dir = source.parent if source is not None else Path.cwd()

    container_section = data.get("container")
    if container_section is None:
        container_section = {}
    if isinstance(container_section, str):
        container_section = {"name": container_section}
    if not isinstance(container_section, Mapping):
        raise _invalid(source, "container must be mapping or name")
    try:
        container = ContainerConfig(**dict(container_section))
    except TypeError as exc:
        raise ControlSheetError(
            ControlSheetErrorCode.INVALID_CONFIG,
            ctx={"path": str(source) if source else None, "error": "unknown container option"},
            cause=exc,
        )

    defaults = ControlDefaults().with_overrides(data.get("defaults"))

    rows = _parse_controls(data.get("controls"), source=source, base_dir=base_dir)

    return ControlSheet(rows=tuple(rows), container=container, defaults=defaults, source=source)


def _parse_controls(section: Any, *, source: Path | None, base_dir: Path) -> list[Mapping[str, Any]]:
    if section is None:
        return []
    if isinstance(section, str):
        if not section.startswith(FILE_PREFIX):
            raise _invalid(source, "controls must be list or '@file:' string")
        section = _load_inline_payload((base_dir / section.removeprefix(FILE_PREFIX)).resolve())
    if not isinstance(section, list):
        raise _invalid(source, "controls must be list")

    for index, row in enumerate(section):
        if not isinstance(row, Mapping):
            raise _invalid(source, "control row must be mapping", row=index)
    logger.debug("parsed %d control rows from %s", len(section), source)
    return list(section)


def _load_inline_payload(path: Path) -> Any:
    if not path.is_file():
        raise _invalid(path, "@file target not found")
    if path.suffix.lower() == ".csv":
        return rows_from_frame(read_csv_with_context(path))
    return _parse_structured(path)
