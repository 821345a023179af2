"""PDF content extraction orchestration."""

import asyncio
from typing import Optional

from pdf_ingest.config import ExtractionConfig
from pdf_ingest.decoder import decode_payload, parse_data_uri
from pdf_ingest.engines import EngineRegistry, get_registry
from pdf_ingest.exceptions import (
    DocumentParseError,
    EngineUnavailableError,
    ExtractionFailedError,
    ExtractionTimeoutError,
    MalformedInputError,
    PageExtractionWarning,
)
from pdf_ingest.language import detect_language
from pdf_ingest.logger import Deadline, Timer, get_logger, set_request_id
from pdf_ingest.models import ExtractedContent
from pdf_ingest.ocr import TesseractOCREngine
from pdf_ingest.renderer import PageRenderer
from pdf_ingest.text import PyMuPDFTextExtractor

logger = get_logger(__name__)

PDF_MIME_TYPE = "application/pdf"

# Raised to the caller unchanged; everything else becomes ExtractionFailedError.
_PUBLIC_ERRORS = (
    MalformedInputError,
    DocumentParseError,
    ExtractionTimeoutError,
    EngineUnavailableError,
)


class PDFContentExtractor:
    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        text_extractor: Optional[PyMuPDFTextExtractor] = None,
        renderer: Optional[PageRenderer] = None,
        ocr_engine: Optional[TesseractOCREngine] = None,
        registry: Optional[EngineRegistry] = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            config: Extraction configuration. If None, uses defaults.
            text_extractor: Native text extractor. If None, creates default.
            renderer: Page renderer used for the OCR fallback. If None, creates default.
            ocr_engine: OCR engine used for the fallback. If None, creates default.
            registry: Engine registry. If None, uses the process-wide registry.
        """
        self.config = config or ExtractionConfig()
        self.registry = registry or get_registry(self.config.ocr)
        self.text_extractor = text_extractor or PyMuPDFTextExtractor(
            self.config.extractor, self.registry
        )
        self.renderer = renderer or PageRenderer(self.config.render, registry=self.registry)
        self.ocr_engine = ocr_engine or TesseractOCREngine(self.config.ocr, self.registry)

    def is_text_sparse(self, text: str) -> bool:
        return len(text.strip()) < self.config.sparse_text_threshold

    def extract(self, data_uri: str) -> ExtractedContent:
        """Extract text, page images, OCR text and metadata from a PDF data URI.

        Page images and OCR only run when the native text is sparse.

        Raises:
            MalformedInputError: If the data URI cannot be decoded
            DocumentParseError: If the PDF cannot be opened
            ExtractionTimeoutError: If the configured budget is exceeded
            EngineUnavailableError: If a required engine is missing
            ExtractionFailedError: For any other failure
        """
        set_request_id()
        deadline = Deadline(self.config.timeout_seconds)

        try:
            with Timer("pdf_content_extraction") as total_timer:
                content = self._extract(data_uri, deadline)
        except _PUBLIC_ERRORS as exc:
            logger.warning(
                "PDF content extraction failed",
                extra_data={"error_type": type(exc).__name__, "error": str(exc)},
            )
            raise
        except Exception as exc:
            logger.error(
                "Unexpected error during PDF content extraction",
                extra_data={"error_type": type(exc).__name__, "error": str(exc)},
                exc_info=True,
            )
            raise ExtractionFailedError(
                f"Failed to extract PDF content: {exc}", cause=exc
            ) from exc

        logger.info(
            "PDF content extracted",
            extra_data={
                "page_count": content.metadata.page_count,
                "characters_extracted": len(content.text),
                "ocr_characters": len(content.ocr_text or ""),
                "images": len(content.images),
                "language": content.metadata.language,
                "is_scanned": content.metadata.is_scanned,
                "warnings": len(content.warnings),
                "total_time_ms": total_timer.get_elapsed_ms(),
            },
        )
        return content

    def _extract(self, data_uri: str, deadline: Deadline) -> ExtractedContent:
        encoded = parse_data_uri(data_uri)
        if encoded.mime_type != PDF_MIME_TYPE:
            logger.warning(
                "Data URI is not declared as a PDF, parsing anyway",
                extra_data={"mime_type": encoded.mime_type},
            )
        pdf_bytes = decode_payload(encoded)
        deadline.check("decoding")

        native = self.text_extractor.extract(pdf_bytes, deadline)
        warnings: list[PageExtractionWarning] = list(native.warnings)

        text_sparse = self.is_text_sparse(native.text)
        images: list[bytes] = []
        ocr_text = ""
        if text_sparse:
            logger.info(
                "Native text is sparse, falling back to rendering and OCR",
                extra_data={
                    "native_characters": len(native.text.strip()),
                    "threshold": self.config.sparse_text_threshold,
                    "page_count": native.page_count,
                },
            )
            rendered = self.renderer.render(pdf_bytes, deadline)
            images = rendered.images
            warnings.extend(rendered.warnings)

            recognized = self.ocr_engine.recognize(images, deadline)
            ocr_text = recognized.text
            warnings.extend(recognized.warnings)
            deadline.check("OCR")

        combined = f"{native.text} {ocr_text}".strip()
        language = detect_language(combined, self.config.language_sample_size)

        return ExtractedContent.assemble(
            text=native.text,
            images=images,
            ocr_text=ocr_text,
            page_count=native.page_count,
            title=native.title,
            author=native.author,
            language=language,
            text_sparse=text_sparse,
            warnings=warnings,
        )


def extract_pdf_content(
    data_uri: str, config: Optional[ExtractionConfig] = None
) -> ExtractedContent:
    """Extract content from a ``data:application/pdf;base64,...`` string.

    Examples:
        >>> content = extract_pdf_content(data_uri)
        >>> content.metadata.page_count
        3
    """
    return PDFContentExtractor(config=config).extract(data_uri)


async def extract_pdf_content_async(
    data_uri: str, config: Optional[ExtractionConfig] = None
) -> ExtractedContent:
    """Run ``extract_pdf_content`` in a worker thread."""
    return await asyncio.to_thread(extract_pdf_content, data_uri, config)
