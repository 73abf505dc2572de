"""pandas helpers for control sheets stored as tables.

Centralizes CSV parsing with structured error context:
- Original pandas error message
- Problematic line number when available
- Nearby CSV lines so the CLI can print useful diagnostics
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, List, Optional

import pandas as pd

from controlsheet.sheet_dsl.errors import ControlSheetError, ControlSheetErrorCode
from controlsheet.sheet_dsl.models import RESERVED_KEYS, ControlSpec


def _extract_line_number(error_msg: str) -> Optional[int]:
    """Best-effort extraction of a line number from a pandas ParserError message."""
    for pattern in (r"line\s+(\d+)", r"row\s+(\d+)"):
        m = re.search(pattern, error_msg, flags=re.IGNORECASE)
        if m:
            return int(m.group(1))
    return None


def read_csv_with_context(path: Path, context_lines: int = 2) -> pd.DataFrame:
    """Read a control CSV, keeping identity columns as strings.

    Raises:
        ControlSheetError: INVALID_SHEET with ``reason=csv_parse_error`` on
            pandas parse failures, including a snippet around the bad line.
    """
    try:
        return pd.read_csv(path, dtype={key: str for key in RESERVED_KEYS})
    except pd.errors.EmptyDataError as exc:
        raise ControlSheetError(
            ControlSheetErrorCode.INVALID_SHEET,
            ctx={"reason": "csv_empty", "path": str(path)},
            cause=exc,
        )
    except UnicodeDecodeError as exc:
        raise ControlSheetError(
            ControlSheetErrorCode.INVALID_SHEET,
            ctx={"reason": "csv_not_utf8", "path": str(path)},
            cause=exc,
        )
    except pd.errors.ParserError as exc:
        try:
            lines: List[str] = path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError):
            lines = []

        error_msg = str(exc)
        line_num = _extract_line_number(error_msg)

        ctx: dict[str, object] = {
            "reason": "csv_parse_error",
            "path": str(path),
            "pandas_error": error_msg,
        }
        if line_num:
            ctx["line_number"] = line_num

        if line_num and 1 <= line_num <= len(lines):
            start = max(1, line_num - context_lines)
            end = min(len(lines), line_num + context_lines)
            ctx["snippet"] = [
                {"line": i, "text": lines[i - 1], "is_error": i == line_num}
                for i in range(start, end + 1)
            ]

        raise ControlSheetError(ControlSheetErrorCode.INVALID_SHEET, ctx=ctx, cause=exc)


def _to_python(value: Any) -> Any:
    # numpy scalars -> builtins so descriptors compare and serialize cleanly
    if hasattr(value, "item") and not isinstance(value, (list, tuple, dict)):
        return value.item()
    return value


def _coerce_numeric(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return _to_python(pd.to_numeric(value))
    except (ValueError, TypeError):
        return value


def rows_from_frame(frame: pd.DataFrame) -> list[ControlSpec]:
    """Convert a DataFrame into control rows, dropping empty cells.

    pandas types a column as a whole, so a column mixing numbers and words
    (``value`` for a slider next to a select) arrives as strings; numeric
    cells of such option columns are read back as numbers.
    """

    mixed_columns = {
        key
        for key in frame.columns
        if key not in RESERVED_KEYS
        and (pd.api.types.is_object_dtype(frame[key]) or pd.api.types.is_string_dtype(frame[key]))
    }
    rows: list[ControlSpec] = []
    for record in frame.to_dict(orient="records"):
        row: dict[str, Any] = {}
        for key, value in record.items():
            if pd.api.types.is_scalar(value) and pd.isna(value):
                continue
            value = _to_python(value)
            if key in RESERVED_KEYS and not isinstance(value, str):
                value = str(value)
            elif key in mixed_columns:
                value = _coerce_numeric(value)
            row[str(key)] = value
        rows.append(row)
    return rows
