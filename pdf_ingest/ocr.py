"""Tesseract OCR over rendered page images."""

import io
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Optional, Sequence

from PIL import Image, ImageEnhance

from pdf_ingest.config import OCRConfig
from pdf_ingest.engines import OCR_ENGINE, EngineRegistry, get_registry
from pdf_ingest.exceptions import ExtractionTimeoutError, PageExtractionWarning
from pdf_ingest.logger import Deadline, Timer, get_logger

logger = get_logger(__name__)


@dataclass
class OCRResult:
    text: str = ""
    warnings: list[PageExtractionWarning] = field(default_factory=list)


class TesseractOCREngine:
    """Runs Tesseract with a multi-language bundle on each image independently.

    Images are recognized in parallel on a thread pool. Results are joined in
    input order, skipping images that failed or produced no text.
    """

    def __init__(
        self,
        config: Optional[OCRConfig] = None,
        registry: Optional[EngineRegistry] = None,
    ):
        self.config = config or OCRConfig()
        self.registry = registry or get_registry(self.config)

    @property
    def tesseract_flags(self) -> str:
        flags = f"--psm {self.config.psm_mode}"
        if self.config.use_oem_1:
            flags = f"--oem 1 {flags}"
        return flags

    def recognize(self, images: Sequence[bytes], deadline: Optional[Deadline] = None) -> OCRResult:
        """Recognize text in ``images``.

        Raises:
            EngineUnavailableError: If Tesseract or every language pack is missing.
            ExtractionTimeoutError: If ``deadline`` expires.
        """
        if not images:
            return OCRResult()

        pytesseract = self.registry.require(OCR_ENGINE)
        languages = "+".join(self.registry.ocr_languages(self.config.language_codes))
        deadline = deadline or Deadline()

        logger.debug(
            "Starting OCR on page images",
            extra_data={
                "image_count": len(images),
                "languages": languages,
                "max_workers": self.config.max_workers,
            },
        )

        texts: dict[int, str] = {}
        warnings: dict[int, PageExtractionWarning] = {}
        with Timer("ocr") as timer:
            with ThreadPoolExecutor(max_workers=max(1, self.config.max_workers)) as executor:
                future_to_index = {
                    executor.submit(
                        self._recognize_one, pytesseract, image, languages, deadline
                    ): index
                    for index, image in enumerate(images)
                }
                try:
                    for future in as_completed(future_to_index):
                        index = future_to_index[future]
                        try:
                            texts[index] = future.result()
                        except ExtractionTimeoutError:
                            raise
                        except Exception as exc:
                            logger.warning(
                                "OCR failed for page image",
                                extra_data={
                                    "page_number": index + 1,
                                    "error_type": type(exc).__name__,
                                    "error": str(exc),
                                },
                            )
                            warnings[index] = PageExtractionWarning("ocr", index + 1, exc)
                            texts[index] = ""
                except ExtractionTimeoutError:
                    for future in future_to_index:
                        future.cancel()
                    raise

        ordered = [texts[i] for i in range(len(images)) if texts.get(i)]
        total_text = "\n\n".join(ordered)

        logger.info(
            "OCR completed for page images",
            extra_data={
                "image_count": len(images),
                "images_with_text": len(ordered),
                "failed_images": len(warnings),
                "total_characters": len(total_text),
                "ocr_time_ms": timer.get_elapsed_ms(),
            },
        )
        return OCRResult(
            text=total_text,
            warnings=[warnings[i] for i in sorted(warnings)],
        )

    def _recognize_one(
        self, pytesseract, image_bytes: bytes, languages: str, deadline: Deadline
    ) -> str:
        deadline.check("OCR")
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                prepared = self._preprocess(image)
                text = pytesseract.image_to_string(
                    prepared,
                    lang=languages,
                    config=self.tesseract_flags,
                    timeout=self._tesseract_timeout(deadline),
                )
        except Exception as exc:
            if deadline.expired():
                raise ExtractionTimeoutError("Extraction budget exceeded during OCR") from exc
            raise
        return text.strip()

    @staticmethod
    def _tesseract_timeout(deadline: Deadline) -> float:
        # pytesseract treats 0 as "no timeout"
        remaining = deadline.remaining()
        if remaining is None:
            return 0
        return max(remaining, 0.001)

    def _preprocess(self, image: Image.Image) -> Image.Image:
        if not self.config.enable_image_preprocessing:
            return image.convert("RGB")
        grayscale = image.convert("L")
        if self.config.contrast_enhancement == 1.0:
            return grayscale
        return ImageEnhance.Contrast(grayscale).enhance(self.config.contrast_enhancement)
