"""
Shared test doubles: an in-memory API client and a recording notifier.
"""

from __future__ import annotations

from typing import Any, Optional

from exammodules.api import ApiError
from exammodules.notify import Notifier


class FakeClient:
    def __init__(self, payload: Any = None, fail_fetch: bool = False) -> None:
        self.payload = payload if payload is not None else []
        self.fail_fetch = fail_fetch
        self.fail_exam = False
        self.fail_survey = False
        self.exam_calls: list[list[dict[str, Any]]] = []
        self.survey_calls: list[list[dict[str, Any]]] = []

    def get_all_exam_modules(self) -> Any:
        if self.fail_fetch:
            raise ApiError("Network response was not ok", status_code=500)
        return self.payload

    def create_exam_sheet(self, entries: list[dict[str, Any]]) -> None:
        self.exam_calls.append(entries)
        if self.fail_exam:
            raise ApiError("POST /Workers/CreateExamSheet failed", status_code=500)

    def create_survey_sheet(self, entries: list[dict[str, Any]]) -> None:
        self.survey_calls.append(entries)
        if self.fail_survey:
            raise ApiError("POST /Workers/CreateSurveySheet failed", status_code=500)


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))


def module(module_id: int, name: str, end: Optional[str] = "2024-12-20", **extra: Any) -> dict[str, Any]:
    data = {"moduleId": module_id, "modulName": name, "startDate": "2024-09-01", "endDate": end}
    data.update(extra)
    return data


def klass(class_id: int, name: str, program: str, modules: list[dict[str, Any]]) -> dict[str, Any]:
    return {"classId": class_id, "className": name, "programName": program, "modules": modules}
