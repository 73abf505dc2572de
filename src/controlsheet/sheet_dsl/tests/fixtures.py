from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from controlsheet.sheet_dsl import ControlSheet
from controlsheet.sheet_dsl.loader import parse_sheet_mapping


@dataclass
class ControlSheetFactory:
    """Utility for building in-memory sheets anchored to a temp directory."""

    base_dir: Path
    source_name: str = "sheet.yaml"

    def parse(self, payload: Mapping[str, Any]) -> ControlSheet:
        return parse_sheet_mapping(
            deepcopy(payload),
            source=self.base_dir / self.source_name,
            base_dir=self.base_dir,
        )
