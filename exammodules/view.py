"""
View-model for the exam module table.

ExamModuleView owns every piece of mutable UI state:
- all_rows:      full flattened set (only used for program filter options)
- filtered_rows: rows ending after the cutoff, mutated in place on toggle
- filters:       committed search text + column filter selections
- loading/error: fetch state

Presentation adapters (interactive.py, cli.py) get a view injected and
talk to it only through the methods below.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Iterable, Optional

from exammodules.api import ApiError, StudioApiClient
from exammodules.columns import ColumnSpec, build_columns, sort_rows
from exammodules.config import END_DATE_CUTOFF
from exammodules.filters import TableFilters, apply_filters, check_selection
from exammodules.flatten import PayloadError, filter_by_end_date, flatten_modules, program_names
from exammodules.model import ModuleRow
from exammodules.notify import Notifier
from exammodules.sync import FlagSynchronizer, flip_flag


class ExamModuleView:
    def __init__(
        self,
        client: StudioApiClient,
        notifier: Notifier,
        cutoff: datetime = END_DATE_CUTOFF,
    ) -> None:
        self.client = client
        self.cutoff = cutoff
        self.synchronizer = FlagSynchronizer(client, notifier)

        self.loading = True
        self.error: Optional[str] = None
        self.all_rows: list[ModuleRow] = []
        self.filtered_rows: list[ModuleRow] = []
        self.filters = TableFilters.from_columns(self.columns())

    # -----------------------------------------------------------------------
    # Loading
    # -----------------------------------------------------------------------

    async def load(self) -> bool:
        """
        One-shot fetch. Any failure puts the view into the error state.
        Returns True when rows were loaded.
        """
        self.loading = True
        self.error = None
        try:
            payload = await asyncio.to_thread(self.client.get_all_exam_modules)
            rows = flatten_modules(payload)
        except (ApiError, PayloadError) as e:
            self.error = str(e)
            self.all_rows = []
            self.filtered_rows = []
            return False
        finally:
            self.loading = False

        self.all_rows = rows
        self.set_filtered_rows(filter_by_end_date(rows, self.cutoff))
        return True

    def set_filtered_rows(self, rows: Iterable[ModuleRow]) -> None:
        self.filtered_rows = list(rows)

    # -----------------------------------------------------------------------
    # Derived data
    # -----------------------------------------------------------------------

    def program_names(self) -> list[str]:
        return program_names(self.all_rows)

    def columns(self) -> list[ColumnSpec]:
        return build_columns(self.program_names())

    def column(self, field: str) -> ColumnSpec:
        for col in self.columns():
            if col.field == field:
                return col
        raise KeyError(field)

    def filter_options(self, field: str) -> list[Any]:
        return [value for _, value in self.column(field).filter_options]

    def displayed_rows(self, sort_by: Optional[str] = None, descending: bool = False) -> list[ModuleRow]:
        """
        Rows to show: search -> dedupe -> column filters -> optional date sort.
        """
        columns = self.columns()
        rows = apply_filters(self.filtered_rows, self.filters, columns)
        if sort_by is not None:
            col = next((c for c in columns if c.field == sort_by), None)
            if col is None:
                raise ValueError(f"Column is not sortable: {sort_by!r}")
            rows = sort_rows(rows, col, descending=descending)
        return rows

    # -----------------------------------------------------------------------
    # Events from the presentation adapter
    # -----------------------------------------------------------------------

    def search_confirm(self, text: str) -> None:
        self.filters.search_text = text.strip()

    def search_reset(self) -> None:
        self.filters.search_text = ""

    def set_program_filter(self, names: Iterable[str]) -> None:
        selected = list(dict.fromkeys(names))
        check_selection(self.column("program_name"), selected)
        self.filters.programs = frozenset(selected)

    def set_survey_filter(self, value: Optional[bool]) -> None:
        if value is not None:
            check_selection(self.column("survey"), [value])
        self.filters.survey = value

    def set_exam_filter(self, values: Iterable[bool]) -> None:
        selected = list(dict.fromkeys(values))
        check_selection(self.column("exam"), selected)
        self.filters.exam = frozenset(selected)

    def apply_flag_toggle(self, row: ModuleRow, field: str) -> bool:
        """
        Local (optimistic) flip only, no remote write. Returns the new value.
        """
        return flip_flag(self.filtered_rows, row, field)

    def toggle(self, row: ModuleRow, field: str) -> asyncio.Task:
        """
        Checkbox click: flip locally now, write to the server in the background.
        """
        return self.synchronizer.toggle(self.filtered_rows, row, field)

    async def close(self) -> None:
        await self.synchronizer.wait_pending()
