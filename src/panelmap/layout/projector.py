"""Read-only section grids derived from the current item set."""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Iterable

from panelmap.models import Item

_DIGITS_RE = re.compile(r"(\d+)")


def natural_sort_key(label: str) -> tuple[tuple[int, int, str], ...]:
    """Sort key comparing digit runs numerically and other runs lexically.

    ``"Section 2"`` sorts before ``"Section 10"``; a label that is a strict
    prefix of another sorts first.
    """

    parts: list[tuple[int, int, str]] = []
    for part in _DIGITS_RE.split(label):
        if not part:
            continue
        if part.isdigit():
            parts.append((0, int(part), part))
        else:
            parts.append((1, 0, part))
    return tuple(parts)


def natural_sorted(labels: Iterable[str]) -> list[str]:
    return sorted(labels, key=natural_sort_key)


@dataclass(slots=True)
class SectionGrid:
    section: str
    cells: list[list[Item | None]] = field(default_factory=list)
    placed: int = 0
    total: int = 0

    @property
    def row_count(self) -> int:
        return len(self.cells)

    @property
    def column_count(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    def cell(self, row: int, column: int) -> Item | None:
        """Return the item at a 1-based row/column, or ``None`` if empty."""

        if not 1 <= row <= self.row_count or not 1 <= column <= self.column_count:
            return None
        return self.cells[row - 1][column - 1]

    def to_dict(self) -> dict[str, object]:
        return {
            "section": self.section,
            "rows": self.row_count,
            "columns": self.column_count,
            "placed": self.placed,
            "total": self.total,
            "cells": [
                [item.serial if item is not None else None for item in row]
                for row in self.cells
            ],
        }


@dataclass(slots=True)
class LayoutSummary:
    total: int
    placed: int
    sections: list[str]

    @property
    def remaining(self) -> int:
        return self.total - self.placed

    @property
    def completion_percent(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.placed / self.total * 100, 2)

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "placed": self.placed,
            "remaining": self.remaining,
            "completion_percent": self.completion_percent,
            "sections": list(self.sections),
        }


def project_layout(items: Iterable[Item]) -> dict[str, SectionGrid]:
    """Group items by section into dense grids, sections in natural order."""

    by_section: dict[str, list[Item]] = {}
    for item in items:
        if not item.section:
            continue
        by_section.setdefault(item.section, []).append(item)

    layout: dict[str, SectionGrid] = {}
    for section in natural_sorted(by_section):
        section_items = by_section[section]
        max_row = max((item.row or 0 for item in section_items), default=0)
        max_column = max((item.column or 0 for item in section_items), default=0)

        grid = SectionGrid(
            section=section,
            cells=[[None] * max_column for _ in range(max_row)],
            placed=sum(1 for item in section_items if item.is_placed),
            total=len(section_items),
        )
        for item in section_items:
            if item.row and item.column:
                grid.cells[item.row - 1][item.column - 1] = item
        layout[section] = grid

    return layout


def summarize(items: Iterable[Item]) -> LayoutSummary:
    materialized = list(items)
    sections = natural_sorted({item.section for item in materialized if item.section})
    return LayoutSummary(
        total=len(materialized),
        placed=sum(1 for item in materialized if item.is_placed),
        sections=sections,
    )
