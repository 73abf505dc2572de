"""Data structures backing the control sheet DSL."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Sequence

from controlsheet.sheet_dsl.errors import ControlSheetError, ControlSheetErrorCode

# One declarative input row: parameter name -> value. Must carry an ``id``.
ControlSpec = Mapping[str, Any]

RESERVED_KEYS = ("id", "label", "kind")
CONTROL_KINDS = ("slider", "numeric", "select", "checkbox", "text")
DEFAULT_KIND = "slider"


@dataclass(frozen=True)
class ControlDefaults:
    """Option values applied to every control unless a row overrides them.

    A field set to ``None`` contributes no option at all.
    """

    min: Any = 0
    max: Any = 1
    value: Any = 0.5
    step: Any = 0.1

    @classmethod
    def option_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def with_overrides(self, overrides: Mapping[str, Any] | None) -> "ControlDefaults":
        """Return a copy with ``overrides`` applied; later source wins."""

        if not overrides:
            return self
        if not isinstance(overrides, Mapping):
            raise ControlSheetError(
                ControlSheetErrorCode.INVALID_CONFIG,
                ctx={"error": "defaults must be mapping"},
            )
        unknown = sorted(set(overrides) - set(self.option_names()))
        if unknown:
            raise ControlSheetError(
                ControlSheetErrorCode.INVALID_CONFIG,
                ctx={"error": "unknown default option", "options": tuple(unknown)},
            )
        return replace(self, **dict(overrides))

    def as_options(self) -> dict[str, Any]:
        return {
            name: getattr(self, name)
            for name in self.option_names()
            if getattr(self, name) is not None
        }


@dataclass(frozen=True)
class ContainerConfig:
    name: str = "controls"
    allow_empty: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ControlSheetError(
                ControlSheetErrorCode.INVALID_CONFIG,
                ctx={"error": "container name must be non-empty string"},
            )
        if not isinstance(self.allow_empty, bool):
            raise ControlSheetError(
                ControlSheetErrorCode.INVALID_CONFIG,
                ctx={"error": "allow_empty must be boolean", "value": self.allow_empty},
            )


@dataclass(frozen=True)
class ControlDescriptor:
    """Fully resolved, ready-to-render representation of one control."""

    id: str
    label: str
    kind: str = DEFAULT_KIND
    options: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        # Read-only view over a private copy; callers keep their own rows.
        object.__setattr__(self, "options", MappingProxyType(deepcopy(dict(self.options))))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "kind": self.kind,
            "options": deepcopy(dict(self.options)),
        }


@dataclass(frozen=True)
class ContainerDescriptor:
    """Ordered grouping of controls, in input row order."""

    name: str
    controls: tuple[ControlDescriptor, ...] = ()

    def __len__(self) -> int:
        return len(self.controls)

    def __iter__(self) -> Iterator[ControlDescriptor]:
        return iter(self.controls)

    @property
    def ids(self) -> list[str]:
        return [control.id for control in self.controls]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "controls": [control.to_dict() for control in self.controls],
        }


@dataclass(frozen=True)
class ControlSheet:
    """Top-level sheet bundle loaded from disk or built in memory."""

    rows: Sequence[ControlSpec]
    container: ContainerConfig = field(default_factory=ContainerConfig)
    defaults: ControlDefaults = field(default_factory=ControlDefaults)
    source: Path | None = None
