"""
Table search and column filters.

Filter rules:
- search: the Group Name column's on_filter with the committed search text
- program: row program name is one of the selected names
- survey / exam: row flag equals one of the selected values
An empty selection means "no constraint". Selections are matched with each
column's on_filter predicate, so a row passes a column if it matches ANY
selected value and passes the table if it passes EVERY column.

Initial selections come from each column's default_filter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from exammodules.columns import ColumnSpec
from exammodules.flatten import unique_by_display_identity
from exammodules.model import ModuleRow


SEARCH_FIELD = "class_name"


@dataclass
class TableFilters:
    # committed search text (set on "Search", cleared on "Reset")
    search_text: str = ""
    programs: frozenset[str] = frozenset()
    # single-select
    survey: Optional[bool] = None
    exam: frozenset[bool] = frozenset()

    @classmethod
    def from_columns(cls, columns: list[ColumnSpec]) -> "TableFilters":
        """
        Start from the default_filter of each column.
        """
        defaults = {c.field: list(c.default_filter) for c in columns}
        survey = defaults.get("survey") or [None]
        return cls(
            programs=frozenset(defaults.get("program_name", [])),
            survey=survey[0],
            exam=frozenset(defaults.get("exam", [])),
        )

    def selections(self) -> dict[str, list[Any]]:
        """
        Selected filter values per column field.
        """
        out: dict[str, list[Any]] = {}
        if self.search_text:
            out[SEARCH_FIELD] = [self.search_text]
        if self.programs:
            out["program_name"] = sorted(self.programs)
        if self.survey is not None:
            out["survey"] = [self.survey]
        if self.exam:
            out["exam"] = sorted(self.exam)
        return out


def check_selection(column: ColumnSpec, values: list[Any]) -> None:
    """
    Raise ValueError if `values` is not a valid selection for the column menu.
    """
    if not column.filter_multiple and len(values) > 1:
        raise ValueError(f"Column {column.title!r} allows a single filter value")
    allowed = [v for _, v in column.filter_options]
    for v in values:
        if v not in allowed:
            raise ValueError(f"{v!r} is not a filter option of column {column.title!r}")


def _passes(row: ModuleRow, column: Optional[ColumnSpec], values: Optional[list[Any]]) -> bool:
    if not values or column is None or column.on_filter is None:
        return True
    return any(column.on_filter(v, row) for v in values)


def apply_filters(
    rows: Iterable[ModuleRow], filters: TableFilters, columns: list[ColumnSpec]
) -> list[ModuleRow]:
    """
    Search first, then collapse duplicates, then apply the column filters.
    """
    by_field = {c.field: c for c in columns}
    selected = filters.selections()

    search_col = by_field.get(SEARCH_FIELD)
    searched = [r for r in rows if _passes(r, search_col, selected.get(SEARCH_FIELD))]
    unique = unique_by_display_identity(searched)

    out: list[ModuleRow] = []
    for r in unique:
        if all(_passes(r, c, selected.get(c.field)) for c in columns if c.field != SEARCH_FIELD):
            out.append(r)
    return out
