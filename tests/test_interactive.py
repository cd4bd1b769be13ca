"""
Tests for the interactive table session, driven by scripted input.
"""

import io
import unittest
from unittest import mock

from rich.console import Console

from exammodules.interactive import TableSession, render_table, run_interactive
from exammodules.view import ExamModuleView
from tests.helpers import FakeClient, RecordingNotifier, klass, module


def payload():
    modules = [module(i, f"Module {i:02d}") for i in range(1, 13)]
    return [
        klass(1, "BE-101", "Programming Backend", modules),
        klass(2, "AZ-1", "Proqramlaşdırma", [module(50, "Alqoritmlər")]),
    ]


class TestInteractive(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.client = FakeClient(payload())
        self.notifier = RecordingNotifier()
        self.view = ExamModuleView(self.client, self.notifier)
        self.out = io.StringIO()
        p = mock.patch("exammodules.interactive.console", Console(file=self.out, width=200))
        p.start()
        self.addCleanup(p.stop)

    async def run_script(self, *answers: str) -> None:
        with mock.patch("exammodules.interactive._prompt", side_effect=list(answers)):
            await run_interactive(self.view)

    async def test_toggle_exam_from_menu(self) -> None:
        await self.run_script("7", "1", "0")
        self.assertEqual(self.client.exam_calls, [[{"moduleId": 1, "classId": 1, "isExam": True}]])
        self.assertEqual(self.notifier.messages, [("success", "Exam data successfully posted")])
        self.assertIn("Bye.", self.out.getvalue())

    async def test_hidden_survey_control_is_refused(self) -> None:
        # AZ-1 is the only match, so it is row 1
        await self.run_script("1", "AZ", "6", "1", "0")
        self.assertEqual(self.client.survey_calls, [])
        self.assertIn("No survey checkbox", self.out.getvalue())

    async def test_fetch_error_shows_error(self) -> None:
        self.client.fail_fetch = True
        await self.run_script()
        self.assertIn("Error: Network response was not ok", self.out.getvalue())

    async def test_paging(self) -> None:
        await self.view.load()
        session = TableSession(self.view, page_size=10)
        rows, total, pages = session.page_rows()
        self.assertEqual((len(rows), total, pages), (10, 13, 2))

        session.page = 5
        rows, total, pages = session.page_rows()
        self.assertEqual(session.page, 1)
        self.assertEqual(len(rows), 3)
        self.assertEqual(session.row_by_number(13).module_id, 50)
        self.assertIsNone(session.row_by_number(14))

    async def test_render_table_row_count(self) -> None:
        await self.view.load()
        table = render_table(self.view.displayed_rows(), self.view.columns())
        self.assertEqual(table.row_count, 13)


if __name__ == "__main__":
    unittest.main()
