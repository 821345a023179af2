"""Native PDF text extraction with PyMuPDF."""

from dataclasses import dataclass, field
from typing import Optional

from pdf_ingest.config import ExtractorConfig
from pdf_ingest.engines import MARKDOWN_ENGINE, PDF_ENGINE, EngineRegistry, get_registry
from pdf_ingest.exceptions import DocumentParseError, PageExtractionWarning
from pdf_ingest.logger import Deadline, Timer, get_logger

logger = get_logger(__name__)


@dataclass
class NativeText:
    """Text layer and declared metadata of a PDF."""

    text: str
    page_count: int
    title: Optional[str] = None
    author: Optional[str] = None
    warnings: list[PageExtractionWarning] = field(default_factory=list)


def open_pdf(fitz, pdf_bytes: bytes):
    """Open ``pdf_bytes`` as a PyMuPDF document usable as a context manager.

    Raises:
        DocumentParseError: If the bytes are not a readable, unlocked PDF
            with at least one page.
    """
    try:
        document = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as exc:
        raise DocumentParseError(f"Not a parseable PDF: {exc}") from exc

    if document.needs_pass:
        document.close()
        raise DocumentParseError("PDF is encrypted and requires a password")
    if document.page_count == 0:
        document.close()
        raise DocumentParseError("PDF has no pages")
    return document


def _metadata_value(metadata: Optional[dict], key: str) -> Optional[str]:
    value = (metadata or {}).get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class PyMuPDFTextExtractor:
    """Reads the text layer of every page in order.

    A page that fails to extract contributes an empty string and a
    ``PageExtractionWarning``; the remaining pages are still read.
    """

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        registry: Optional[EngineRegistry] = None,
    ):
        self.config = config or ExtractorConfig()
        self.registry = registry or get_registry()
        if self.config.text_format not in ("text", "markdown"):
            raise ValueError(f"Unsupported text_format: {self.config.text_format}")

    def extract(self, pdf_bytes: bytes, deadline: Optional[Deadline] = None) -> NativeText:
        """Extract text, page count, title and author.

        Raises:
            EngineUnavailableError: If PyMuPDF cannot be loaded.
            DocumentParseError: If the PDF cannot be opened.
            ExtractionTimeoutError: If ``deadline`` expires mid-document.
        """
        fitz = self.registry.require(PDF_ENGINE)
        markdown = None
        if self.config.text_format == "markdown":
            markdown = self.registry.require(MARKDOWN_ENGINE)
        deadline = deadline or Deadline()

        with Timer("pdf_text_extraction") as timer:
            with open_pdf(fitz, pdf_bytes) as document:
                page_count = document.page_count
                metadata = document.metadata
                page_texts: list[str] = []
                warnings: list[PageExtractionWarning] = []

                for page_index in range(page_count):
                    deadline.check("text extraction")
                    try:
                        page_texts.append(self._page_text(document, page_index, markdown))
                    except Exception as exc:
                        warning = PageExtractionWarning("text", page_index + 1, exc)
                        logger.warning(
                            "Text extraction failed for page",
                            extra_data={
                                "page_number": page_index + 1,
                                "error_type": type(exc).__name__,
                                "error": str(exc),
                            },
                        )
                        warnings.append(warning)
                        page_texts.append("")

        text = "\n".join(page_texts).strip()
        logger.debug(
            "PDF native text extraction completed",
            extra_data={
                "page_count": page_count,
                "characters_extracted": len(text),
                "failed_pages": len(warnings),
                "text_format": self.config.text_format,
                "extraction_time_ms": timer.get_elapsed_ms(),
            },
        )

        return NativeText(
            text=text,
            page_count=page_count,
            title=_metadata_value(metadata, "title"),
            author=_metadata_value(metadata, "author"),
            warnings=warnings,
        )

    def _page_text(self, document, page_index: int, markdown=None) -> str:
        if markdown is not None:
            return markdown.to_markdown(
                document,
                pages=[page_index],
                table_strategy=self.config.table_strategy,
                force_text=self.config.force_text,
                fontsize_limit=self.config.fontsize_limit,
                write_images=False,
                ignore_images=True,
                show_progress=False,
            ).strip()

        return document.load_page(page_index).get_text("text").strip()
