from __future__ import annotations

from panelmap.layout.projector import natural_sort_key, natural_sorted, project_layout, summarize
from panelmap.models import Item


def _item(
    item_id: int,
    serial: str,
    section: str | None = None,
    row: int | None = None,
    column: int | None = None,
) -> Item:
    placed_at = "2024-05-01T08:00:00+00:00" if section is not None else None
    return Item(
        id=item_id,
        collection_id=1,
        package_id="P1",
        serial=serial,
        section=section,
        row=row,
        column=column,
        placed_at=placed_at,
    )


def test_natural_sort_compares_digit_runs_numerically() -> None:
    assert natural_sorted(["A10", "A2", "A1", "B1"]) == ["A1", "A2", "A10", "B1"]
    assert natural_sorted(["Section 10", "Section 2", "Section 1"]) == ["Section 1", "Section 2", "Section 10"]


def test_natural_sort_places_prefix_first() -> None:
    assert natural_sorted(["Roof A-2", "Roof A", "Roof"]) == ["Roof", "Roof A", "Roof A-2"]
    assert natural_sort_key("A") < natural_sort_key("A1")


def test_natural_sort_handles_mixed_digit_and_text_parts() -> None:
    assert natural_sorted(["B", "10", "2", "A"]) == ["2", "10", "A", "B"]


def test_project_layout_builds_dense_grids_in_natural_order() -> None:
    items = [
        _item(1, "S1", "Section 10", 1, 1),
        _item(2, "S2", "Section 2", 2, 3),
        _item(3, "S3", "Section 2", 1, 1),
        _item(4, "S4"),
    ]

    layout = project_layout(items)

    assert list(layout) == ["Section 2", "Section 10"]
    grid = layout["Section 2"]
    assert grid.row_count == 2
    assert grid.column_count == 3
    assert grid.cell(1, 1).serial == "S3"
    assert grid.cell(2, 3).serial == "S2"
    assert grid.cell(1, 2) is None
    assert grid.cell(3, 1) is None
    assert grid.placed == 2
    assert grid.total == 2


def test_row_only_items_extend_rows_without_occupying_cells() -> None:
    layout = project_layout([_item(1, "S1", "A", 3), _item(2, "S2", "A", 1, 2)])

    grid = layout["A"]
    assert grid.row_count == 3
    assert grid.column_count == 2
    assert grid.placed == 2
    assert all(cell is None for cell in grid.cells[2])


def test_grid_to_dict_exposes_serials() -> None:
    grid = project_layout([_item(1, "S1", "A", 1, 2)])["A"]

    assert grid.to_dict() == {
        "section": "A",
        "rows": 1,
        "columns": 2,
        "placed": 1,
        "total": 1,
        "cells": [[None, "S1"]],
    }


def test_empty_input_projects_to_empty_layout() -> None:
    assert project_layout([]) == {}
    assert project_layout([_item(1, "S1")]) == {}


def test_summarize_reports_progress() -> None:
    summary = summarize(
        [
            _item(1, "S1", "B2", 1, 1),
            _item(2, "S2", "B10", 1, 1),
            _item(3, "S3"),
        ]
    )

    assert summary.total == 3
    assert summary.placed == 2
    assert summary.remaining == 1
    assert summary.completion_percent == 66.67
    assert summary.sections == ["B2", "B10"]
    assert summarize([]).completion_percent == 0.0
