"""High-level API for PDF parsing."""

import base64
from pathlib import Path
from typing import Optional

from pdf_ingest.config import ExtractionConfig
from pdf_ingest.models import ExtractedContent
from pdf_ingest.orchestrator import PDF_MIME_TYPE, PDFContentExtractor


def to_data_uri(file_bytes: bytes, mime_type: str = PDF_MIME_TYPE) -> str:
    return f"data:{mime_type};base64," + base64.b64encode(file_bytes).decode("ascii")


def parse_pdf(
    file_path: Optional[str] = None,
    file_bytes: Optional[bytes] = None,
    config: Optional[ExtractionConfig] = None,
) -> ExtractedContent:
    """Extract content from a PDF on disk or in memory.

    Args:
        file_path: Path to a PDF file (alternative to file_bytes)
        file_bytes: Raw PDF bytes (alternative to file_path)
        config: Extraction configuration (optional, uses defaults if not provided)

    Returns:
        ExtractedContent with text, page images, OCR text and metadata

    Raises:
        ValueError: If neither or both of file_path and file_bytes are given,
            or if file_path does not exist
        MalformedInputError: If file_bytes is empty
        DocumentParseError: If the file is not a usable PDF
        ExtractionTimeoutError: If the configured budget is exceeded
        ExtractionFailedError: For any other failure

    Examples:
        >>> result = parse_pdf(file_path="report.pdf")
        >>> print(result.metadata.title)

        >>> config = ExtractionConfig(sparse_text_threshold=50, timeout_seconds=30)
        >>> with open("scan.pdf", "rb") as f:
        ...     result = parse_pdf(file_bytes=f.read(), config=config)
    """
    if file_path is not None and file_bytes is not None:
        raise ValueError("Provide either file_path or file_bytes, not both")
    if file_path is None and file_bytes is None:
        raise ValueError("Must provide either file_path or file_bytes")

    if file_path is not None:
        path = Path(file_path)
        if not path.is_file():
            raise ValueError(f"File not found: {file_path}")
        file_bytes = path.read_bytes()

    extractor = PDFContentExtractor(config=config)
    return extractor.extract(to_data_uri(file_bytes))
