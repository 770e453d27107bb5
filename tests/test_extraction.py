import sys
import unittest
from io import BytesIO
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.parsing.extract import ExtractionError, extract_text  # noqa: E402


class ExtractTextTests(unittest.TestCase):
    def test_plain_text_is_decoded(self):
        content = "Jane Doe\nSenior Engineer\nPython, SQL".encode("utf-8")
        extracted = extract_text("resume.txt", content, "text/plain")

        self.assertEqual(extracted.source_type, "text")
        self.assertEqual(extracted.text, "Jane Doe\nSenior Engineer\nPython, SQL")

    def test_text_mime_type_wins_over_unknown_extension(self):
        extracted = extract_text("resume", "Plain résumé".encode("utf-8"), "text/plain; charset=utf-8")
        self.assertEqual(extracted.text, "Plain résumé")

    def test_empty_content_raises(self):
        with self.assertRaises(ExtractionError):
            extract_text("resume.pdf", b"", "application/pdf")

    def test_corrupt_pdf_raises_extraction_error(self):
        with self.assertRaises(ExtractionError):
            extract_text("resume.pdf", b"this is not a pdf at all", "application/pdf")

    def test_unknown_types_are_read_as_pdf(self):
        with self.assertRaises(ExtractionError) as ctx:
            extract_text("resume.bin", b"\x00\x01\x02", "application/octet-stream")
        self.assertIn("PDF", str(ctx.exception))

    def test_blank_pdf_yields_empty_text_with_warning(self):
        from pypdf import PdfWriter

        writer = PdfWriter()
        writer.add_blank_page(width=612, height=792)
        buffer = BytesIO()
        writer.write(buffer)

        extracted = extract_text("blank.pdf", buffer.getvalue(), "application/pdf")
        self.assertEqual(extracted.source_type, "pdf")
        self.assertEqual(extracted.pages, 1)
        self.assertEqual(extracted.text, "")
        self.assertTrue(extracted.warnings)

    def test_docx_paragraphs_are_joined(self):
        from docx import Document

        document = Document()
        document.add_paragraph("Jane Doe")
        document.add_paragraph("")
        document.add_paragraph("Data Analyst")
        buffer = BytesIO()
        document.save(buffer)

        extracted = extract_text("resume.docx", buffer.getvalue())
        self.assertEqual(extracted.source_type, "docx")
        self.assertEqual(extracted.text, "Jane Doe\nData Analyst")


if __name__ == "__main__":
    unittest.main()
