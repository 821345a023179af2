"""Boundary between PDF extraction and the chat response flow.

The hosted model sits behind ``Summarizer``. A summary is produced either
from extracted text or from the raw data URI for models that accept
embedded media. When neither works the chat turn continues with a
filename-only acknowledgment.
"""

from typing import Optional, Protocol

from pdf_ingest.config import ExtractionConfig
from pdf_ingest.decoder import parse_data_uri
from pdf_ingest.exceptions import MalformedInputError, PdfIngestError
from pdf_ingest.logger import get_logger
from pdf_ingest.models import ExtractedContent
from pdf_ingest.orchestrator import PDF_MIME_TYPE, PDFContentExtractor

logger = get_logger(__name__)

MODE_EXTRACT = "extract"
MODE_RAW = "raw"

SUMMARY_UNAVAILABLE = "Could not summarize the PDF."


class Summarizer(Protocol):
    def summarize_text(self, text: str, language: str) -> str:
        ...

    def summarize_file(self, data_uri: str) -> str:
        ...


def filename_acknowledgment(file_name: str) -> str:
    return f"The user attached a file named {file_name}."


def build_summary_prompt(content: ExtractedContent) -> str:
    """Text handed to the model when summarizing extracted content."""
    lines = []
    if content.metadata.title:
        lines.append(f"Title: {content.metadata.title}")
    if content.metadata.author:
        lines.append(f"Author: {content.metadata.author}")
    lines.append(f"Pages: {content.metadata.page_count}")
    lines.append(f"Language: {content.metadata.language}")
    if content.metadata.is_scanned:
        lines.append("The document is scanned; the text below was recognized with OCR.")
    lines.append("")
    lines.append(content.combined_text)
    return "\n".join(lines)


def summarize_attachment(
    data_uri: str,
    file_name: str,
    summarizer: Summarizer,
    mode: str = MODE_EXTRACT,
    config: Optional[ExtractionConfig] = None,
) -> str:
    """Return a summary of an attached file for the chat response prompt.

    Non-PDF attachments, extraction failures and summarizer failures all
    fall back to ``filename_acknowledgment``.
    """
    if mode not in (MODE_EXTRACT, MODE_RAW):
        raise ValueError(f"Unknown summarization mode: {mode}")

    try:
        mime_type = parse_data_uri(data_uri).mime_type
    except MalformedInputError as exc:
        logger.warning(
            "Attachment is not a valid data URI",
            extra_data={"file_name": file_name, "error": str(exc)},
        )
        return filename_acknowledgment(file_name)

    if mime_type != PDF_MIME_TYPE:
        logger.info(
            "Attachment is not a PDF, skipping summarization",
            extra_data={"file_name": file_name, "mime_type": mime_type},
        )
        return filename_acknowledgment(file_name)

    try:
        if mode == MODE_RAW:
            summary = summarizer.summarize_file(data_uri)
        else:
            content = PDFContentExtractor(config=config).extract(data_uri)
            if not content.combined_text:
                logger.warning(
                    "No text extracted from attachment",
                    extra_data={"file_name": file_name},
                )
                return filename_acknowledgment(file_name)
            summary = summarizer.summarize_text(
                build_summary_prompt(content), content.metadata.language
            )
    except PdfIngestError as exc:
        logger.warning(
            "Summarization unavailable for attachment",
            extra_data={
                "file_name": file_name,
                "error_type": type(exc).__name__,
                "error": str(exc),
            },
        )
        return filename_acknowledgment(file_name)
    except Exception as exc:
        logger.error(
            "Summarizer failed for attachment",
            extra_data={
                "file_name": file_name,
                "error_type": type(exc).__name__,
                "error": str(exc),
            },
            exc_info=True,
        )
        return filename_acknowledgment(file_name)

    return (summary or "").strip() or SUMMARY_UNAVAILABLE


def build_file_context(file_summary: Optional[str]) -> str:
    """Prompt block describing the attached file, empty when there is none."""
    if not file_summary:
        return ""
    return (
        "The user has attached a file, and here is a summary of its content:\n"
        f"{file_summary}\n"
    )
