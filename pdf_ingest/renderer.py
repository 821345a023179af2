"""Page rasterization behind a two-step rasterize/encode contract."""

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from PIL import Image

from pdf_ingest.config import RenderConfig
from pdf_ingest.engines import PDF_ENGINE, EngineRegistry, get_registry
from pdf_ingest.exceptions import PageExtractionWarning
from pdf_ingest.logger import Deadline, Timer, get_logger
from pdf_ingest.text import open_pdf

logger = get_logger(__name__)


@dataclass(frozen=True)
class RGBABuffer:
    """Raw RGBA pixels of one rendered page, 4 bytes per pixel, row-major."""

    width: int
    height: int
    samples: bytes

    def __post_init__(self):
        expected = self.width * self.height * 4
        if len(self.samples) != expected:
            raise ValueError(
                f"RGBA buffer of {self.width}x{self.height} needs {expected} bytes, "
                f"got {len(self.samples)}"
            )


@dataclass
class RenderResult:
    images: list[bytes] = field(default_factory=list)
    warnings: list[PageExtractionWarning] = field(default_factory=list)


class PageRasterizer(ABC):
    """Backend that turns one page of an open document into RGBA pixels."""

    @abstractmethod
    def rasterize(self, document, page_index: int, scale: float) -> RGBABuffer:
        ...


class ImageEncoder(ABC):
    """Backend that encodes an RGBA buffer into an image file format."""

    @abstractmethod
    def encode(self, buffer: RGBABuffer, image_format: str = "png") -> bytes:
        ...


class PyMuPDFRasterizer(PageRasterizer):
    def __init__(self, registry: Optional[EngineRegistry] = None):
        self.registry = registry or get_registry()

    def rasterize(self, document, page_index: int, scale: float) -> RGBABuffer:
        fitz = self.registry.require(PDF_ENGINE)
        page = document.load_page(page_index)
        pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
        # Opaque alpha channel; a transparent page background would OCR as black
        pix = fitz.Pixmap(pix, 1)
        return RGBABuffer(width=pix.width, height=pix.height, samples=bytes(pix.samples))


class PillowImageEncoder(ImageEncoder):
    def encode(self, buffer: RGBABuffer, image_format: str = "png") -> bytes:
        image = Image.frombuffer(
            "RGBA", (buffer.width, buffer.height), buffer.samples, "raw", "RGBA", 0, 1
        )
        output = io.BytesIO()
        image.save(output, format=image_format.upper())
        return output.getvalue()


class PyMuPDFImageEncoder(ImageEncoder):
    """Encodes through ``fitz.Pixmap``; PNG only."""

    def __init__(self, registry: Optional[EngineRegistry] = None):
        self.registry = registry or get_registry()

    def encode(self, buffer: RGBABuffer, image_format: str = "png") -> bytes:
        if image_format.lower() != "png":
            raise ValueError(f"PyMuPDFImageEncoder only writes PNG, not {image_format}")
        fitz = self.registry.require(PDF_ENGINE)
        pix = fitz.Pixmap(fitz.csRGB, buffer.width, buffer.height, buffer.samples, 1)
        return pix.tobytes("png")


def build_encoder(config: RenderConfig, registry: Optional[EngineRegistry] = None) -> ImageEncoder:
    if config.encoder == "pillow":
        return PillowImageEncoder()
    if config.encoder == "pymupdf":
        return PyMuPDFImageEncoder(registry)
    raise ValueError(f"Unknown image encoder: {config.encoder}")


class PageRenderer:
    """Renders every page of a PDF to an encoded image.

    Each page is rasterized and encoded on its own; a failing page is logged,
    recorded as a warning and left out of the result.
    """

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        rasterizer: Optional[PageRasterizer] = None,
        encoder: Optional[ImageEncoder] = None,
        registry: Optional[EngineRegistry] = None,
    ):
        self.config = config or RenderConfig()
        self.registry = registry or get_registry()
        self.rasterizer = rasterizer or PyMuPDFRasterizer(self.registry)
        self.encoder = encoder or build_encoder(self.config, self.registry)

    def render(self, pdf_bytes: bytes, deadline: Optional[Deadline] = None) -> RenderResult:
        """Render pages 1..N in order.

        Raises:
            EngineUnavailableError: If PyMuPDF cannot be loaded.
            DocumentParseError: If the PDF cannot be opened.
            ExtractionTimeoutError: If ``deadline`` expires mid-document.
        """
        fitz = self.registry.require(PDF_ENGINE)
        deadline = deadline or Deadline()
        result = RenderResult()

        with Timer("pdf_render") as timer:
            with open_pdf(fitz, pdf_bytes) as document:
                page_count = document.page_count
                for page_index in range(page_count):
                    deadline.check("page rendering")
                    try:
                        buffer = self.rasterizer.rasterize(document, page_index, self.config.scale)
                        image = self.encoder.encode(buffer, self.config.image_format)
                    except Exception as exc:
                        logger.warning(
                            "Rendering failed for page",
                            extra_data={
                                "page_number": page_index + 1,
                                "error_type": type(exc).__name__,
                                "error": str(exc),
                            },
                        )
                        result.warnings.append(PageExtractionWarning("render", page_index + 1, exc))
                        continue
                    result.images.append(image)

        logger.info(
            "PDF pages rendered",
            extra_data={
                "page_count": page_count,
                "pages_rendered": len(result.images),
                "scale": self.config.scale,
                "render_time_ms": timer.get_elapsed_ms(),
            },
        )
        return result
