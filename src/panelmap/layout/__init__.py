"""Derived grid views over placed items."""

from .projector import (
    LayoutSummary,
    SectionGrid,
    natural_sort_key,
    natural_sorted,
    project_layout,
    summarize,
)

__all__ = [
    "LayoutSummary",
    "SectionGrid",
    "natural_sort_key",
    "natural_sorted",
    "project_layout",
    "summarize",
]
