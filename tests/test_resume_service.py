import json
import os
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("ANALYTICS_ENABLED", "0")

from app.analysis.normalizer import AnalysisNormalizer  # noqa: E402
from app.core.resume_store import ResumeStore  # noqa: E402
from app.services.resume_service import (  # noqa: E402
    NO_FILE_PLACEHOLDER,
    extraction_placeholder,
    upload_and_analyze,
)


class RecordingEvaluator:
    model = "recording-model"

    def __init__(self, reply: str):
        self.reply = reply
        self.user_texts: list[str] = []

    async def complete_json(self, messages, *, temperature):
        self.user_texts.append(messages[-1].content)
        return self.reply


class UploadAndAnalyzeTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.store = ResumeStore(":memory:")
        self.evaluator = RecordingEvaluator(
            json.dumps(
                {
                    "score": 64,
                    "skills": ["Excel", "Reporting"],
                    "suggestions": ["Add a skills section"],
                    "jobSuggestions": ["Data Analyst"],
                }
            )
        )
        self.normalizer = AnalysisNormalizer(self.evaluator)

    def tearDown(self):
        self.store.close()

    async def test_text_upload_is_extracted_evaluated_and_stored(self):
        record = await upload_and_analyze(
            filename="resume.txt",
            content=b"Jane Doe - Analyst",
            mime_type="text/plain",
            normalizer=self.normalizer,
            store=self.store,
        )

        self.assertEqual(self.evaluator.user_texts, ["Jane Doe - Analyst"])
        self.assertEqual(record.original_name, "resume.txt")
        self.assertEqual(record.size, len(b"Jane Doe - Analyst"))
        self.assertEqual(record.analysis.score, 64)
        self.assertEqual(self.store.get(record.id), record)

    async def test_extraction_failure_uses_placeholder_text(self):
        record = await upload_and_analyze(
            filename="broken.pdf",
            content=b"not really a pdf",
            mime_type="application/pdf",
            normalizer=self.normalizer,
            store=self.store,
        )

        self.assertEqual(self.evaluator.user_texts, [extraction_placeholder("broken.pdf")])
        self.assertIsNotNone(record.analysis)

    async def test_reply_with_lone_surrogate_is_still_stored(self):
        self.evaluator.reply = (
            '{"score": 70, "skills": ["Py\\ud800thon"], '
            '"suggestions": ["Add metrics"], "jobSuggestions": ["Developer"]}'
        )
        record = await upload_and_analyze(
            filename="resume.txt",
            content=b"Jane Doe",
            mime_type="text/plain",
            normalizer=self.normalizer,
            store=self.store,
        )

        self.assertEqual(record.analysis.skills, ["Basic resume skills"])
        self.assertEqual(record.analysis.suggestions, ["Add metrics"])
        self.assertEqual(self.store.get(record.id), record)

    async def test_empty_upload_uses_no_file_placeholder(self):
        record = await upload_and_analyze(
            filename="empty.pdf",
            content=b"",
            mime_type=None,
            normalizer=self.normalizer,
            store=self.store,
        )

        self.assertEqual(self.evaluator.user_texts, [NO_FILE_PLACEHOLDER])
        self.assertEqual(record.size, 0)
        self.assertEqual(record.mime_type, "application/octet-stream")


if __name__ == "__main__":
    unittest.main()
