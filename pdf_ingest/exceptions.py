"""Exceptions raised by the PDF ingestion pipeline."""

from typing import Optional


class PdfIngestError(Exception):
    """Base exception for PDF ingestion errors."""

    pass


class MalformedInputError(PdfIngestError):
    """Raised when a data URI cannot be decoded into bytes."""

    pass


class DocumentParseError(PdfIngestError):
    """Raised when the decoded bytes are not a usable PDF."""

    pass


class ExtractionTimeoutError(PdfIngestError):
    """Raised when extraction exceeds its wall-clock budget."""

    pass


class EngineUnavailableError(PdfIngestError):
    """Raised when a required native engine cannot be loaded."""

    def __init__(self, engine: str, reason: str = ""):
        self.engine = engine
        self.reason = reason
        message = f"Engine '{engine}' is not available"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ExtractionFailedError(PdfIngestError):
    """Raised for any unexpected failure during extraction.

    The original exception is kept on ``cause`` and chained via ``__cause__``.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class PageExtractionWarning(UserWarning):
    """Recoverable failure on a single page or image.

    Never raised by the pipeline. Instances are logged and collected into
    ``ExtractedContent.warnings``.
    """

    def __init__(self, stage: str, page_number: int, cause: BaseException):
        self.stage = stage
        self.page_number = page_number
        self.cause = cause
        super().__init__(
            f"{stage} failed on page {page_number}: {type(cause).__name__}: {cause}"
        )
