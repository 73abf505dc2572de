"""Apply the builder across an ordered sequence of rows."""

from __future__ import annotations

from typing import Callable, Iterable

from controlsheet.sheet_dsl.builder import build_control
from controlsheet.sheet_dsl.errors import DuplicateIdError
from controlsheet.sheet_dsl.models import ControlDefaults, ControlDescriptor, ControlSpec

Builder = Callable[[ControlSpec, ControlDefaults], ControlDescriptor]


def build_controls(
    rows: Iterable[ControlSpec],
    *,
    defaults: ControlDefaults | None = None,
    builder: Builder = build_control,
) -> list[ControlDescriptor]:
    """Build one descriptor per row, preserving row order.

    Rows are built independently; the only cross-row check is id uniqueness.
    """

    resolved = defaults or ControlDefaults()
    seen: dict[str, int] = {}
    controls: list[ControlDescriptor] = []
    for index, row in enumerate(rows):
        control = builder(row, resolved)
        if control.id in seen:
            raise DuplicateIdError(
                ctx={"id": control.id, "first_row": seen[control.id], "row": index}
            )
        seen[control.id] = index
        controls.append(control)
    return controls
