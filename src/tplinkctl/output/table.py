"""Aligned plain-text tables for rows whose columns are not known up front.

A row is a sequence of ``(label, value)`` pairs. Columns are discovered while
scanning the rows: a label gets its position the first time it is seen and
its width grows to fit the label and every value rendered under it.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from rich.cells import cell_len

Row = Sequence[tuple[str, Any]]

ABSENT = "-"
FILLER = ""
COLUMN_SEPARATOR = " | "
SEPARATOR_CROSS = "-+-"


def human_stringify(value: Any) -> str:
    if value is None:
        return ABSENT
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, str)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(human_stringify(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    return str(value)


def pad(value: str, width: int) -> str:
    return value + " " * max(width - cell_len(value), 0)


@dataclass
class Column:
    label: str
    order: int
    width: int


@dataclass
class ColumnRegistry:
    """Columns seen during one render call, keyed by label."""

    columns: dict[str, Column] = field(default_factory=dict)

    def observe(self, label: str, rendered: str) -> None:
        width = max(cell_len(label), cell_len(rendered))
        column = self.columns.get(label)
        if column is None:
            self.columns[label] = Column(label, len(self.columns), width)
        elif column.width < width:
            column.width = width

    def ordered(self) -> list[Column]:
        return sorted(self.columns.values(), key=lambda column: column.order)


def _check_pair(item: Any) -> tuple[str, Any]:
    if (
        not isinstance(item, (tuple, list))
        or len(item) != 2
        or not isinstance(item[0], str)
    ):
        raise AssertionError(f"(bug) row element is not a label/value pair: {item!r}")
    return item[0], item[1]


def collect(rows: Iterable[Row]) -> tuple[ColumnRegistry, list[dict[str, str]]]:
    """Scan ``rows`` once, returning the columns and the rendered cells."""
    registry = ColumnRegistry()
    processed: list[dict[str, str]] = []
    for row in rows:
        if isinstance(row, (str, dict)):
            raise AssertionError(f"(bug) row is not a sequence of pairs: {row!r}")
        cells: dict[str, str] = {}
        for item in row:
            label, value = _check_pair(item)
            rendered = human_stringify(value)
            cells[label] = rendered
            registry.observe(label, rendered)
        processed.append(cells)
    return registry, processed


def render_lines(
    registry: ColumnRegistry, processed: Sequence[dict[str, str]]
) -> list[str]:
    columns = registry.ordered()
    if not columns:
        return []

    def _line(cells: dict[str, str]) -> str:
        padded = (pad(cells.get(c.label, FILLER), c.width) for c in columns)
        return f" {COLUMN_SEPARATOR.join(padded)} "

    lines = [_line({c.label: c.label for c in columns})]
    lines.append(f"-{SEPARATOR_CROSS.join('-' * c.width for c in columns)}-")
    lines.extend(_line(cells) for cells in processed)
    return lines


def render_table(rows: Iterable[Row]) -> str:
    registry, processed = collect(rows)
    return "\n".join(render_lines(registry, processed))
