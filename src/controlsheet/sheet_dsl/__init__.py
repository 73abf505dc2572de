"""Row-per-control sheet DSL package."""

from .assembler import assemble_container
from .builder import build_control
from .compiler import compile_controls, compile_sheet
from .errors import (
    ControlSheetError,
    ControlSheetErrorCode,
    DuplicateIdError,
    EmptyContainerError,
    InvalidSpecError,
)
from .loader import load_sheet, parse_sheet_mapping
from .mapper import build_controls
from .models import (
    ContainerConfig,
    ContainerDescriptor,
    ControlDefaults,
    ControlDescriptor,
    ControlSheet,
)

__all__ = [
    "ContainerConfig",
    "ContainerDescriptor",
    "ControlDefaults",
    "ControlDescriptor",
    "ControlSheet",
    "assemble_container",
    "build_control",
    "build_controls",
    "compile_controls",
    "compile_sheet",
    "load_sheet",
    "parse_sheet_mapping",
    "ControlSheetError",
    "ControlSheetErrorCode",
    "DuplicateIdError",
    "EmptyContainerError",
    "InvalidSpecError",
]
