"""Data models for PDF ingestion."""

import base64
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from pdf_ingest.exceptions import PageExtractionWarning


@dataclass(frozen=True)
class DocumentMetadata:
    """Document-level facts reported alongside the extracted text."""

    page_count: int
    title: Optional[str] = None
    author: Optional[str] = None
    language: str = "en"
    has_images: bool = False
    is_scanned: bool = False


@dataclass(frozen=True)
class ExtractedContent:
    """Result of extracting one PDF.

    Build instances with ``assemble()`` so that ``has_images`` and
    ``is_scanned`` are always derived from the other fields.
    """

    text: str
    images: tuple[bytes, ...]
    metadata: DocumentMetadata
    ocr_text: Optional[str] = None
    warnings: tuple[PageExtractionWarning, ...] = field(default=())

    @classmethod
    def assemble(
        cls,
        *,
        text: str,
        images: Sequence[bytes],
        page_count: int,
        language: str,
        text_sparse: bool,
        ocr_text: Optional[str] = None,
        title: Optional[str] = None,
        author: Optional[str] = None,
        warnings: Sequence[PageExtractionWarning] = (),
    ) -> "ExtractedContent":
        images = tuple(images)
        ocr_text = (ocr_text or "").strip() or None
        metadata = DocumentMetadata(
            page_count=page_count,
            title=title,
            author=author,
            language=language,
            has_images=len(images) > 0,
            is_scanned=text_sparse and len(images) > 0,
        )
        return cls(
            text=text.strip(),
            images=images,
            metadata=metadata,
            ocr_text=ocr_text,
            warnings=tuple(warnings),
        )

    @property
    def combined_text(self) -> str:
        """Native text followed by OCR text, for prompts and language detection."""
        return f"{self.text} {self.ocr_text or ''}".strip()

    def to_dict(self, include_images: bool = True) -> dict[str, Any]:
        """Serialize to the camelCase record consumed by the chat client."""
        data: dict[str, Any] = {
            "text": self.text,
            "images": [],
            "metadata": {
                "pages": self.metadata.page_count,
                "language": self.metadata.language,
                "hasImages": self.metadata.has_images,
                "isScanned": self.metadata.is_scanned,
            },
        }
        if include_images:
            data["images"] = [
                "data:image/png;base64," + base64.b64encode(image).decode("ascii")
                for image in self.images
            ]
        if self.ocr_text is not None:
            data["ocrText"] = self.ocr_text
        if self.metadata.title is not None:
            data["metadata"]["title"] = self.metadata.title
        if self.metadata.author is not None:
            data["metadata"]["author"] = self.metadata.author
        return data
