"""
Flag synchronization (optimistic local update + remote write).

toggle(rows, row, field):
1. new value = not row.<field> (the snapshot passed in)
2. the row in `rows` with the same (class_id, module_id) is updated at once
3. a one-element sheet write is scheduled on the running event loop
4. the result is reported through the notifier; failures are NOT rolled back

Exam and survey use different endpoints and payload shapes. One toggle
never writes both flags. In-flight writes are independent: nothing is
cancelled, merged or retried.
"""

from __future__ import annotations

import asyncio
from typing import Any, Iterable

from exammodules.api import ApiError, StudioApiClient
from exammodules.model import ModuleRow
from exammodules.notify import Notifier


SURVEY = "survey"
EXAM = "exam"
FIELDS = (SURVEY, EXAM)


class RowNotFoundError(LookupError):
    pass


def _check_field(field: str) -> None:
    if field not in FIELDS:
        raise ValueError(f"Unknown flag field: {field!r} (expected one of {FIELDS})")


def find_row(rows: Iterable[ModuleRow], class_id: Any, module_id: Any) -> ModuleRow:
    for r in rows:
        if r.class_id == class_id and r.module_id == module_id:
            return r
    raise RowNotFoundError(f"No row for classId={class_id!r}, moduleId={module_id!r}")


def flip_flag(rows: Iterable[ModuleRow], row: ModuleRow, field: str) -> bool:
    """
    Negate `field` on the row in `rows` matching the snapshot's key.
    Returns the new value.
    """
    _check_field(field)
    new_value = not getattr(row, field)
    target = find_row(rows, row.class_id, row.module_id)
    setattr(target, field, new_value)
    return new_value


def sheet_entry(row: ModuleRow, field: str, value: bool) -> dict[str, Any]:
    """
    Build the single batch element for one flag write.
    """
    _check_field(field)
    flag_key = "isExam" if field == EXAM else "isSurvey"
    return {"moduleId": row.module_id, "classId": row.class_id, flag_key: value}


class FlagSynchronizer:
    def __init__(self, client: StudioApiClient, notifier: Notifier) -> None:
        self.client = client
        self.notifier = notifier
        self._pending: set[asyncio.Task] = set()

    def toggle(self, rows: list[ModuleRow], row: ModuleRow, field: str) -> asyncio.Task:
        """
        Flip the flag locally, then fire the remote write.

        Must be called from code running on the event loop. The returned
        task resolves to True on success and False on failure.
        """
        new_value = flip_flag(rows, row, field)
        return self.push(row, field, new_value)

    def push(self, row: ModuleRow, field: str, value: bool) -> asyncio.Task:
        entry = sheet_entry(row, field, value)
        task = asyncio.get_running_loop().create_task(self._write(field, entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def wait_pending(self) -> None:
        """
        Wait until every in-flight write has finished.
        """
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def _write(self, field: str, entry: dict[str, Any]) -> bool:
        if field == EXAM:
            send, label = self.client.create_exam_sheet, "exam"
        else:
            send, label = self.client.create_survey_sheet, "survey"

        try:
            await asyncio.to_thread(send, [entry])
        except ApiError:
            # local state stays as toggled until the next full reload
            self.notifier.error(f"Failed to post {label} data")
            return False

        self.notifier.success(f"{label.capitalize()} data successfully posted")
        return True
