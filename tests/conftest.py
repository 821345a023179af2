"""
Test Configuration and Fixtures
"""
import base64
import io

import fitz
import pytest
from PIL import Image, ImageDraw

from pdf_ingest.engines import reset_registry
from pdf_ingest.ocr import OCRResult
from pdf_ingest.text import PyMuPDFTextExtractor

ENGLISH_PARAGRAPH = (
    "The quarterly report shows that revenue grew steadily across every region. "
    "Our team shipped three new products while keeping costs under control. "
    "Customers responded well to the improved onboarding flow, and support tickets "
    "fell by a third compared with last year. We expect growth to continue as the "
    "sales pipeline matures and new partnerships come online. The board approved "
    "the hiring plan for the next two quarters, which adds engineers to the "
    "platform group and analysts to the finance group. Risks remain around supply "
    "costs and currency swings, but the outlook is positive overall. "
)


def to_data_uri(pdf_bytes: bytes) -> str:
    return "data:application/pdf;base64," + base64.b64encode(pdf_bytes).decode("ascii")


def make_text_pdf(pages, title=None, author=None) -> bytes:
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_textbox(fitz.Rect(72, 72, 540, 770), text, fontsize=10)
    metadata = {}
    if title:
        metadata["title"] = title
    if author:
        metadata["author"] = author
    if metadata:
        doc.set_metadata(metadata)
    data = doc.tobytes()
    doc.close()
    return data


def make_png(width=200, height=100, label=True) -> bytes:
    image = Image.new("RGB", (width, height), "white")
    if label:
        draw = ImageDraw.Draw(image)
        draw.rectangle((20, 20, width - 20, height - 20), outline="black", width=3)
    output = io.BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()


def make_scanned_pdf(page_count: int) -> bytes:
    doc = fitz.open()
    png = make_png()
    for _ in range(page_count):
        page = doc.new_page()
        page.insert_image(page.rect, stream=png)
    data = doc.tobytes()
    doc.close()
    return data


class FlakyTextExtractor(PyMuPDFTextExtractor):
    """Fails on the given 0-based page indexes."""

    def __init__(self, failing_pages, **kwargs):
        super().__init__(**kwargs)
        self.failing_pages = set(failing_pages)

    def _page_text(self, document, page_index, markdown=None):
        if page_index in self.failing_pages:
            raise RuntimeError(f"corrupt content stream on page {page_index + 1}")
        return super()._page_text(document, page_index, markdown)


class FakeOCREngine:
    """Records calls instead of running Tesseract."""

    def __init__(self, text="RECOGNIZED TEXT"):
        self.text = text
        self.calls = []

    def recognize(self, images, deadline=None):
        self.calls.append(list(images))
        return OCRResult(text=self.text)


@pytest.fixture(autouse=True)
def fresh_registry():
    reset_registry()
    yield
    reset_registry()


@pytest.fixture
def english_pdf():
    return make_text_pdf([ENGLISH_PARAGRAPH * 3], title="Report", author="Finance Team")


@pytest.fixture
def three_page_pdf():
    return make_text_pdf(
        [
            "First page talks about apples and orchards.",
            "Second page talks about bridges and rivers.",
            "Third page talks about clouds and weather.",
        ]
    )


@pytest.fixture
def scanned_pdf():
    return make_scanned_pdf(5)


@pytest.fixture
def fake_ocr():
    return FakeOCREngine()
