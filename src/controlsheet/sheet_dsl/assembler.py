"""Group built controls into a named container."""

from __future__ import annotations

from typing import Iterable

from controlsheet.sheet_dsl.errors import EmptyContainerError
from controlsheet.sheet_dsl.models import ContainerDescriptor, ControlDescriptor


def assemble_container(
    controls: Iterable[ControlDescriptor],
    name: str,
    *,
    allow_empty: bool = False,
) -> ContainerDescriptor:
    ordered = tuple(controls)
    if not ordered and not allow_empty:
        raise EmptyContainerError(ctx={"container": name})
    return ContainerDescriptor(name=name, controls=ordered)
