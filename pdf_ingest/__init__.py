"""PDF content extraction with OCR fallback for chat attachments."""

from pdf_ingest.attachment import Summarizer, build_file_context, summarize_attachment
from pdf_ingest.config import ExtractionConfig, ExtractorConfig, OCRConfig, RenderConfig
from pdf_ingest.decoder import EncodedFile, decode_data_uri, parse_data_uri
from pdf_ingest.engines import EngineRegistry, get_registry
from pdf_ingest.exceptions import (
    DocumentParseError,
    EngineUnavailableError,
    ExtractionFailedError,
    ExtractionTimeoutError,
    MalformedInputError,
    PageExtractionWarning,
    PdfIngestError,
)
from pdf_ingest.language import detect_language
from pdf_ingest.logger import setup_logging
from pdf_ingest.models import DocumentMetadata, ExtractedContent
from pdf_ingest.ocr import TesseractOCREngine
from pdf_ingest.orchestrator import (
    PDFContentExtractor,
    extract_pdf_content,
    extract_pdf_content_async,
)
from pdf_ingest.parser import parse_pdf
from pdf_ingest.renderer import (
    ImageEncoder,
    PageRasterizer,
    PageRenderer,
    PillowImageEncoder,
    PyMuPDFImageEncoder,
    PyMuPDFRasterizer,
    RGBABuffer,
)
from pdf_ingest.text import PyMuPDFTextExtractor

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "extract_pdf_content",
    "extract_pdf_content_async",
    "parse_pdf",
    "summarize_attachment",
    "build_file_context",
    "decode_data_uri",
    "parse_data_uri",
    "detect_language",
    "setup_logging",
    # Core classes
    "PDFContentExtractor",
    "PyMuPDFTextExtractor",
    "PageRenderer",
    "PageRasterizer",
    "ImageEncoder",
    "PyMuPDFRasterizer",
    "PillowImageEncoder",
    "PyMuPDFImageEncoder",
    "TesseractOCREngine",
    "EngineRegistry",
    "get_registry",
    "Summarizer",
    # Data models
    "ExtractedContent",
    "DocumentMetadata",
    "EncodedFile",
    "RGBABuffer",
    # Configuration
    "ExtractionConfig",
    "ExtractorConfig",
    "OCRConfig",
    "RenderConfig",
    # Exceptions
    "PdfIngestError",
    "MalformedInputError",
    "DocumentParseError",
    "ExtractionTimeoutError",
    "ExtractionFailedError",
    "EngineUnavailableError",
    "PageExtractionWarning",
]
