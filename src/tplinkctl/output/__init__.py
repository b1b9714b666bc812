from __future__ import annotations

from .formatter import (
    OutputFormat,
    render,
    shape_actioned,
    shape_discovered,
    shape_status,
)
from .table import ColumnRegistry, collect, human_stringify, render_table

__all__ = [
    "ColumnRegistry",
    "OutputFormat",
    "collect",
    "human_stringify",
    "render",
    "render_table",
    "shape_actioned",
    "shape_discovered",
    "shape_status",
]
