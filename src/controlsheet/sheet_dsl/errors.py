"""Error types for the control sheet DSL.

Every failure carries an enum code plus a ``ctx`` mapping so callers can
branch on the code and log the context without parsing messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Mapping


class ControlSheetErrorCode(Enum):
    INVALID_SPEC = auto()
    DUPLICATE_ID = auto()
    EMPTY_CONTAINER = auto()
    INVALID_CONFIG = auto()
    INVALID_SHEET = auto()


@dataclass(eq=False)
class ControlSheetError(Exception):
    """Structured error raised by the builder, loader and compiler."""

    code: ControlSheetErrorCode
    ctx: Mapping[str, Any] | None = None
    cause: Exception | None = None

    def __post_init__(self) -> None:
        if self.ctx is None:
            self.ctx = {}
        if self.cause is not None:
            self.__cause__ = self.cause
        super().__init__(self.code.name)

    def __str__(self) -> str:
        if not self.ctx:
            return self.code.name
        parts = ", ".join(f"{k}={v!r}" for k, v in self.ctx.items())
        return f"{self.code.name}: {parts}"


class InvalidSpecError(ControlSheetError):
    """A control row lacks a usable identifier or carries invalid fields."""

    def __init__(self, ctx: Mapping[str, Any] | None = None) -> None:
        super().__init__(ControlSheetErrorCode.INVALID_SPEC, ctx=ctx)


class DuplicateIdError(ControlSheetError):
    def __init__(self, ctx: Mapping[str, Any] | None = None) -> None:
        super().__init__(ControlSheetErrorCode.DUPLICATE_ID, ctx=ctx)


class EmptyContainerError(ControlSheetError):
    def __init__(self, ctx: Mapping[str, Any] | None = None) -> None:
        super().__init__(ControlSheetErrorCode.EMPTY_CONTAINER, ctx=ctx)
