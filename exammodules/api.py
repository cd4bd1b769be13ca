from __future__ import annotations

from typing import Any, Optional

import requests

from exammodules.config import API_BASE_URL, REQUEST_TIMEOUT


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

GET_ALL_EXAM_MODULE = "/Workers/GetAllExamModule"
CREATE_EXAM_SHEET = "/Workers/CreateExamSheet"
CREATE_SURVEY_SHEET = "/Workers/CreateSurveySheet"


class ApiError(Exception):
    """
    Raised for any failed call to the studio API (HTTP status or transport).
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class StudioApiClient:
    """
    Thin blocking wrapper around the three Workers endpoints.

    Callers on the event loop run these methods via asyncio.to_thread.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: Optional[float] = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def _url(self, path: str) -> str:
        return self.base_url + path

    def get_all_exam_modules(self) -> Any:
        """
        Load the nested class -> modules payload.

        Returns the decoded JSON as-is; shape checks happen in flatten.py.
        """
        url = self._url(GET_ALL_EXAM_MODULE)
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise ApiError(f"Network error: {e}") from e

        if not resp.ok:
            raise ApiError("Network response was not ok", status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            raise ApiError("Invalid JSON in response") from e

    def _post_sheet(self, path: str, entries: list[dict[str, Any]]) -> None:
        url = self._url(path)
        try:
            resp = self.session.post(url, json=entries, timeout=self.timeout)
        except requests.RequestException as e:
            raise ApiError(f"Network error: {e}") from e

        if not resp.ok:
            raise ApiError(f"POST {path} failed", status_code=resp.status_code)

    def create_exam_sheet(self, entries: list[dict[str, Any]]) -> None:
        """
        entries: [{"moduleId": ..., "classId": ..., "isExam": bool}, ...]
        """
        self._post_sheet(CREATE_EXAM_SHEET, entries)

    def create_survey_sheet(self, entries: list[dict[str, Any]]) -> None:
        """
        entries: [{"moduleId": ..., "classId": ..., "isSurvey": bool}, ...]
        """
        self._post_sheet(CREATE_SURVEY_SHEET, entries)
