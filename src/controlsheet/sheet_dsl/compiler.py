"""Compilation pipeline: rows -> descriptors -> container."""

from __future__ import annotations

import logging
from typing import Iterable

import pandas as pd

from controlsheet.sheet_dsl.assembler import assemble_container
from controlsheet.sheet_dsl.builder import build_control
from controlsheet.sheet_dsl.mapper import Builder, build_controls
from controlsheet.sheet_dsl.models import (
    ContainerConfig,
    ContainerDescriptor,
    ControlDefaults,
    ControlSheet,
    ControlSpec,
)
from controlsheet.sheet_dsl.tabular import rows_from_frame

logger = logging.getLogger(__name__)


def compile_controls(
    rows: Iterable[ControlSpec] | pd.DataFrame,
    *,
    defaults: ControlDefaults | None = None,
    container: ContainerConfig | None = None,
    builder: Builder = build_control,
) -> ContainerDescriptor:
    """Compile control rows into a single :class:`ContainerDescriptor`.

    ``rows`` may be any iterable of mappings or a pandas DataFrame. Any
    failure aborts the whole build.
    """

    if isinstance(rows, pd.DataFrame):
        rows = rows_from_frame(rows)
    config = container or ContainerConfig()

    controls = build_controls(rows, defaults=defaults, builder=builder)
    result = assemble_container(controls, config.name, allow_empty=config.allow_empty)
    logger.debug("compiled %d controls into container %r", len(result), result.name)
    return result


def compile_sheet(sheet: ControlSheet, *, builder: Builder = build_control) -> ContainerDescriptor:
    return compile_controls(
        sheet.rows,
        defaults=sheet.defaults,
        container=sheet.container,
        builder=builder,
    )
