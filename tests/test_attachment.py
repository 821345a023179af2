"""
Chat Attachment Summarization Tests
"""
import pytest

from conftest import make_scanned_pdf, to_data_uri
from pdf_ingest.attachment import (
    SUMMARY_UNAVAILABLE,
    build_file_context,
    build_summary_prompt,
    summarize_attachment,
)
from pdf_ingest.models import ExtractedContent


class FakeSummarizer:
    def __init__(self, reply="A short summary.", error=None):
        self.reply = reply
        self.error = error
        self.text_calls = []
        self.file_calls = []

    def summarize_text(self, text, language):
        self.text_calls.append((text, language))
        if self.error:
            raise self.error
        return self.reply

    def summarize_file(self, data_uri):
        self.file_calls.append(data_uri)
        if self.error:
            raise self.error
        return self.reply


class TestSummarizeAttachment:
    """Test the chat attachment boundary"""

    def test_extract_mode(self, english_pdf):
        summarizer = FakeSummarizer()
        summary = summarize_attachment(to_data_uri(english_pdf), "report.pdf", summarizer)

        assert summary == "A short summary."
        prompt, language = summarizer.text_calls[0]
        assert language == "en"
        assert "Title: Report" in prompt
        assert "Pages: 1" in prompt
        assert "quarterly report" in prompt
        assert summarizer.file_calls == []

    def test_raw_mode_passes_data_uri(self, english_pdf):
        summarizer = FakeSummarizer()
        uri = to_data_uri(english_pdf)

        assert summarize_attachment(uri, "report.pdf", summarizer, mode="raw") == "A short summary."
        assert summarizer.file_calls == [uri]
        assert summarizer.text_calls == []

    def test_non_pdf_gets_acknowledgment(self):
        summarizer = FakeSummarizer()
        summary = summarize_attachment("data:image/png;base64,AAAA", "photo.png", summarizer)

        assert summary == "The user attached a file named photo.png."
        assert summarizer.text_calls == []

    def test_malformed_uri_gets_acknowledgment(self):
        summary = summarize_attachment("garbage", "broken.pdf", FakeSummarizer())
        assert summary == "The user attached a file named broken.pdf."

    def test_corrupt_pdf_gets_acknowledgment(self):
        uri = "data:application/pdf;base64,aGVsbG8gd29ybGQ="
        summary = summarize_attachment(uri, "corrupt.pdf", FakeSummarizer())
        assert summary == "The user attached a file named corrupt.pdf."

    def test_summarizer_failure_gets_acknowledgment(self, english_pdf):
        summarizer = FakeSummarizer(error=ConnectionError("model unavailable"))
        summary = summarize_attachment(to_data_uri(english_pdf), "report.pdf", summarizer)
        assert summary == "The user attached a file named report.pdf."

    def test_empty_reply(self, english_pdf):
        summarizer = FakeSummarizer(reply="  ")
        summary = summarize_attachment(to_data_uri(english_pdf), "report.pdf", summarizer, mode="raw")
        assert summary == SUMMARY_UNAVAILABLE

    def test_unknown_mode(self, english_pdf):
        with pytest.raises(ValueError):
            summarize_attachment(to_data_uri(english_pdf), "report.pdf", FakeSummarizer(), mode="fast")


class TestPromptFormatting:
    """Test prompt text built for the model"""

    def test_scanned_prompt_mentions_ocr(self):
        content = ExtractedContent.assemble(
            text="",
            images=[b"png"],
            ocr_text="recognized words",
            page_count=1,
            language="en",
            text_sparse=True,
        )
        prompt = build_summary_prompt(content)

        assert "scanned" in prompt
        assert prompt.endswith("recognized words")
        assert "Title:" not in prompt

    def test_file_context(self):
        assert build_file_context(None) == ""
        context = build_file_context("A short summary.")
        assert context.startswith("The user has attached a file")
        assert "A short summary." in context
