"""
Column definitions for the exam module table.

Each ColumnSpec tells a presentation adapter how to show one field:
- render: row -> cell text, or None when the cell stays empty
- sort_key: row -> comparable value (date columns only)
- filter_options / filter_multiple / default_filter: column filter menu
- on_filter: (value, row) -> bool

Checkbox visibility is a business rule over program names:
- the survey checkbox is hidden for "Proqramlaşdırma"
- the exam checkbox exists only for the two programming tracks
Hidden means not rendered and not clickable (never "disabled").
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from exammodules.flatten import format_date, parse_timestamp
from exammodules.model import ModuleRow
from exammodules.sync import EXAM, SURVEY


NO_SURVEY_PROGRAM = "Proqramlaşdırma"
EXAM_PROGRAMS = ("Programming Backend", "Programming Frontend")

CHECKED = "[x]"
UNCHECKED = "[ ]"


def shows_survey_control(row: ModuleRow) -> bool:
    return row.program_name != NO_SURVEY_PROGRAM


def shows_exam_control(row: ModuleRow) -> bool:
    return row.program_name in EXAM_PROGRAMS


def shows_control(row: ModuleRow, flag: str) -> bool:
    if flag == SURVEY:
        return shows_survey_control(row)
    if flag == EXAM:
        return shows_exam_control(row)
    raise ValueError(f"Unknown flag field: {flag!r}")


def _checkbox(checked: bool) -> str:
    return CHECKED if checked else UNCHECKED


def _date_sort_key(attr: str) -> Callable[[ModuleRow], Optional[datetime]]:
    def key(row: ModuleRow) -> Optional[datetime]:
        return parse_timestamp(getattr(row, attr))

    return key


@dataclass
class ColumnSpec:
    title: str
    field: str
    width: Optional[int] = None
    render: Optional[Callable[[ModuleRow], Optional[str]]] = None
    sort_key: Optional[Callable[[ModuleRow], Any]] = None
    filter_options: list[tuple[str, Any]] = field(default_factory=list)
    filter_multiple: bool = True
    default_filter: list[Any] = field(default_factory=list)
    on_filter: Optional[Callable[[Any, ModuleRow], bool]] = None

    def cell(self, row: ModuleRow) -> str:
        """
        Text shown for one row ('' when the renderer shows nothing).
        """
        if self.render is None:
            value = getattr(row, self.field)
            return "" if value is None else str(value)
        text = self.render(row)
        return "" if text is None else text


BOOL_OPTIONS = [("True", True), ("False", False)]


def build_columns(program_options: list[str]) -> list[ColumnSpec]:
    """
    Build the table columns. Program filter options come from the full
    (not date filtered) row set, so they are passed in.
    """
    return [
        ColumnSpec(
            title="Group Name",
            field="class_name",
            width=200,
            on_filter=lambda value, row: str(value).lower() in row.class_name.lower(),
        ),
        ColumnSpec(
            title="Program Name",
            field="program_name",
            width=200,
            filter_options=[(name, name) for name in program_options],
            filter_multiple=True,
            on_filter=lambda value, row: row.program_name == value,
        ),
        ColumnSpec(title="Module Name", field="module_name"),
        ColumnSpec(
            title="Start Date",
            field="start_date",
            width=100,
            render=lambda row: format_date(row.start_date),
            sort_key=_date_sort_key("start_date"),
        ),
        ColumnSpec(
            title="End Date",
            field="end_date",
            width=100,
            render=lambda row: format_date(row.end_date),
            sort_key=_date_sort_key("end_date"),
        ),
        ColumnSpec(
            title="Survey",
            field=SURVEY,
            render=lambda row: _checkbox(row.survey) if shows_survey_control(row) else None,
            filter_options=list(BOOL_OPTIONS),
            filter_multiple=False,
            default_filter=[False],
            on_filter=lambda value, row: row.survey == value,
        ),
        ColumnSpec(
            title="Exam",
            field=EXAM,
            render=lambda row: _checkbox(row.exam) if shows_exam_control(row) else None,
            filter_options=list(BOOL_OPTIONS),
            on_filter=lambda value, row: row.exam == value,
        ),
    ]


def sort_rows(rows: list[ModuleRow], column: ColumnSpec, descending: bool = False) -> list[ModuleRow]:
    """
    Sort by the column's sort key. Rows whose key is None (unparseable dates)
    go last in both directions.
    """
    if column.sort_key is None:
        raise ValueError(f"Column is not sortable: {column.field!r}")
    keyed = [(column.sort_key(r), r) for r in rows]
    present = [(k, r) for k, r in keyed if k is not None]
    missing = [r for k, r in keyed if k is None]
    present.sort(key=lambda kr: kr[0], reverse=descending)
    return [r for _, r in present] + missing
