"""Turn one declarative row into one control descriptor."""

from __future__ import annotations

import math
from typing import Any

from controlsheet.sheet_dsl.errors import InvalidSpecError
from controlsheet.sheet_dsl.models import (
    CONTROL_KINDS,
    DEFAULT_KIND,
    RESERVED_KEYS,
    ControlDefaults,
    ControlDescriptor,
    ControlSpec,
)

CHOICES_SEPARATOR = "|"


def _is_missing(value: Any) -> bool:
    # Tabular sources hand us NaN for empty cells.
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def _resolve_id(spec: ControlSpec) -> str:
    raw = spec.get("id")
    if _is_missing(raw):
        raise InvalidSpecError(ctx={"error": "control id missing"})
    # Numeric ids read the same as the CSV loader reads them.
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise InvalidSpecError(ctx={"error": "control id must be string or number", "id": raw})
    control_id = str(raw).strip()
    if not control_id:
        raise InvalidSpecError(ctx={"error": "control id must be non-empty", "id": raw})
    return control_id


def _resolve_choices(control_id: str, options: dict[str, Any]) -> None:
    choices = options.get("choices")
    if isinstance(choices, str):
        choices = [item.strip() for item in choices.split(CHOICES_SEPARATOR) if item.strip()]
    if not isinstance(choices, (list, tuple)) or not choices:
        raise InvalidSpecError(
            ctx={"error": "select control requires choices", "id": control_id}
        )
    options["choices"] = list(choices)


def build_control(spec: ControlSpec, defaults: ControlDefaults | None = None) -> ControlDescriptor:
    """Build a :class:`ControlDescriptor` from a single row.

    Options start from ``defaults`` and are overridden field by field by any
    non-missing value present in ``spec``. ``label`` falls back to the id.
    """

    if not hasattr(spec, "get"):
        raise InvalidSpecError(ctx={"error": "control row must be mapping"})

    control_id = _resolve_id(spec)

    label = spec.get("label")
    if _is_missing(label) or not str(label).strip():
        label = control_id

    kind = spec.get("kind")
    if _is_missing(kind) or not str(kind).strip():
        kind = DEFAULT_KIND
    kind = str(kind).strip()
    if kind not in CONTROL_KINDS:
        raise InvalidSpecError(
            ctx={"error": "unsupported control kind", "id": control_id, "kind": kind}
        )

    options = (defaults or ControlDefaults()).as_options()
    for key, value in spec.items():
        if key in RESERVED_KEYS or _is_missing(value):
            continue
        options[key] = value

    if kind == "select":
        _resolve_choices(control_id, options)

    return ControlDescriptor(id=control_id, label=str(label), kind=kind, options=options)
