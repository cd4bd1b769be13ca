"""
Unit tests for flag synchronization.

Contract:
- the local flip happens synchronously, before the write runs
- exam and survey use separate endpoints and payload shapes
- a failed write is reported but NOT rolled back
"""

import unittest

from exammodules.flatten import flatten_modules
from exammodules.sync import FlagSynchronizer, RowNotFoundError, flip_flag, sheet_entry
from tests.helpers import FakeClient, RecordingNotifier, klass, module


def sample_rows():
    return flatten_modules(
        [klass(1, "BE-101", "Programming Backend", [module(10, "C#"), module(11, "SQL", isSurvey=True)])]
    )


class TestFlipFlag(unittest.TestCase):
    def test_flip_updates_matching_row(self) -> None:
        rows = sample_rows()
        value = flip_flag(rows, rows[0], "exam")
        self.assertTrue(value)
        self.assertTrue(rows[0].exam)
        self.assertFalse(rows[1].exam)

    def test_flip_uses_key_not_identity(self) -> None:
        rows = sample_rows()
        snapshot = sample_rows()[1]
        self.assertFalse(flip_flag(rows, snapshot, "survey"))
        self.assertFalse(rows[1].survey)

    def test_unknown_field_raises(self) -> None:
        rows = sample_rows()
        with self.assertRaises(ValueError):
            flip_flag(rows, rows[0], "grade")

    def test_missing_row_raises(self) -> None:
        rows = sample_rows()
        other = flatten_modules([klass(9, "X", "Other", [module(99, "Z")])])[0]
        with self.assertRaises(RowNotFoundError):
            flip_flag(rows, other, "exam")

    def test_sheet_entry_shapes(self) -> None:
        row = sample_rows()[0]
        self.assertEqual(sheet_entry(row, "exam", True), {"moduleId": 10, "classId": 1, "isExam": True})
        self.assertEqual(sheet_entry(row, "survey", False), {"moduleId": 10, "classId": 1, "isSurvey": False})


class TestFlagSynchronizer(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.client = FakeClient()
        self.notifier = RecordingNotifier()
        self.sync = FlagSynchronizer(self.client, self.notifier)
        self.rows = sample_rows()

    async def test_local_flip_before_write(self) -> None:
        task = self.sync.toggle(self.rows, self.rows[0], "exam")

        # nothing sent yet, but the row is already checked
        self.assertTrue(self.rows[0].exam)
        self.assertEqual(self.client.exam_calls, [])

        self.assertTrue(await task)
        self.assertEqual(self.client.exam_calls, [[{"moduleId": 10, "classId": 1, "isExam": True}]])
        self.assertEqual(self.client.survey_calls, [])
        self.assertEqual(self.notifier.messages, [("success", "Exam data successfully posted")])

    async def test_survey_uses_survey_endpoint(self) -> None:
        ok = await self.sync.toggle(self.rows, self.rows[1], "survey")
        self.assertTrue(ok)
        self.assertFalse(self.rows[1].survey)
        self.assertEqual(self.client.survey_calls, [[{"moduleId": 11, "classId": 1, "isSurvey": False}]])
        self.assertEqual(self.client.exam_calls, [])
        self.assertEqual(self.notifier.messages, [("success", "Survey data successfully posted")])

    async def test_failed_write_is_not_rolled_back(self) -> None:
        self.client.fail_exam = True
        ok = await self.sync.toggle(self.rows, self.rows[0], "exam")
        self.assertFalse(ok)
        self.assertTrue(self.rows[0].exam)
        self.assertEqual(self.notifier.messages, [("error", "Failed to post exam data")])

    async def test_failed_exam_does_not_block_survey(self) -> None:
        self.client.fail_exam = True
        row = self.rows[0]
        await self.sync.toggle(self.rows, row, "exam")
        self.assertFalse(row.survey)

        ok = await self.sync.toggle(self.rows, row, "survey")
        self.assertTrue(ok)
        self.assertTrue(row.survey)
        self.assertTrue(row.exam)
        self.assertEqual(self.client.survey_calls, [[{"moduleId": 10, "classId": 1, "isSurvey": True}]])

    async def test_double_toggle_sends_both_values(self) -> None:
        row = self.rows[0]
        self.sync.toggle(self.rows, row, "exam")
        self.sync.toggle(self.rows, row, "exam")
        self.assertFalse(row.exam)
        self.assertEqual(self.sync.pending, 2)

        await self.sync.wait_pending()
        self.assertEqual(self.sync.pending, 0)
        sent = sorted(call[0]["isExam"] for call in self.client.exam_calls)
        self.assertEqual(sent, [False, True])


if __name__ == "__main__":
    unittest.main()
