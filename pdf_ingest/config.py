"""Configuration classes for PDF ingestion."""

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_OCR_LANGUAGES = "eng+tel+hin+ara+chi_sim+chi_tra+jpn+kor+rus+spa+fra+deu"


@dataclass
class OCRConfig:
    """Configuration for OCR processing.

    Examples:
        >>> # Default configuration (full multi-language bundle)
        >>> config = OCRConfig()

        >>> # Latin scripts only, fewer workers for small machines
        >>> config = OCRConfig(languages="eng+spa+fra+deu", max_workers=2)
    """

    tesseract_cmd: str = "tesseract"
    """Path to tesseract binary. Default: "tesseract" (assumes in PATH)."""

    tessdata_prefix: Optional[str] = None
    """Optional path to tessdata directory. If None, uses system default."""

    languages: str = DEFAULT_OCR_LANGUAGES
    """OCR languages in Tesseract format.

    Document language is only known after extraction, so recognition runs
    with the whole bundle. Packs missing from the Tesseract install are
    dropped at runtime.
    """

    psm_mode: int = 6
    """Page segmentation mode (0-13). Default: 6 (uniform block of text)."""

    use_oem_1: bool = True
    """Use Tesseract OEM 1 (LSTM engine only)."""

    max_workers: int = 3
    """Number of images recognized in parallel."""

    enable_image_preprocessing: bool = True
    """Convert page images to grayscale and boost contrast before OCR."""

    contrast_enhancement: float = 1.2
    """Contrast factor used when preprocessing is enabled (1.0 = unchanged)."""

    @property
    def language_codes(self) -> list[str]:
        return [code for code in self.languages.split("+") if code]


@dataclass
class RenderConfig:
    """Configuration for page rasterization."""

    scale: float = 1.5
    """Zoom factor applied to every page (1.0 = 72 DPI)."""

    image_format: str = "png"
    """Lossless output format for rendered pages."""

    encoder: str = "pillow"
    """Image encoder backend: "pillow" or "pymupdf"."""


@dataclass
class ExtractorConfig:
    """Configuration for native text extraction."""

    text_format: str = "text"
    """Either "text" (PyMuPDF plain text) or "markdown" (pymupdf4llm)."""

    table_strategy: str = "lines_strict"
    """Table detection strategy, markdown mode only."""

    fontsize_limit: int = 3
    """Ignore text smaller than this point size, markdown mode only."""

    force_text: bool = True
    """Extract text even when it overlaps images, markdown mode only."""


@dataclass
class ExtractionConfig:
    """Top-level configuration for ``PDFContentExtractor``."""

    sparse_text_threshold: int = 10
    """Native text shorter than this (after trimming) triggers the OCR fallback."""

    timeout_seconds: Optional[float] = None
    """Wall-clock budget for one extraction call. None disables the budget."""

    language_sample_size: int = 1000
    """Number of leading characters inspected by language detection."""

    ocr: OCRConfig = field(default_factory=OCRConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)
