"""Lazy lifecycle for the native engines (PyMuPDF, Tesseract)."""

import importlib
import os
import threading
from types import ModuleType
from typing import Optional

from pdf_ingest.config import OCRConfig
from pdf_ingest.exceptions import EngineUnavailableError
from pdf_ingest.logger import get_logger

logger = get_logger(__name__)

PDF_ENGINE = "pymupdf"
MARKDOWN_ENGINE = "pymupdf4llm"
OCR_ENGINE = "tesseract"

_MODULES = {
    PDF_ENGINE: "fitz",
    MARKDOWN_ENGINE: "pymupdf4llm",
    OCR_ENGINE: "pytesseract",
}


class EngineRegistry:
    """Loads each engine at most once and remembers whether it worked.

    Components call ``require()`` to get the engine module, or
    ``is_available()`` to probe without raising.
    """

    def __init__(self, ocr_config: Optional[OCRConfig] = None):
        self.ocr_config = ocr_config or OCRConfig()
        self._lock = threading.Lock()
        self._modules: dict[str, ModuleType] = {}
        self._failures: dict[str, str] = {}
        self._ocr_languages: Optional[frozenset[str]] = None
        self._reported_missing: set[str] = set()

    def _load(self, name: str) -> None:
        if name in self._modules or name in self._failures:
            return
        if name not in _MODULES:
            raise KeyError(f"Unknown engine: {name}")

        try:
            module = importlib.import_module(_MODULES[name])
            if name == OCR_ENGINE:
                self._apply_tesseract_paths(module)
                # Fails fast when the binary is missing
                version = module.get_tesseract_version()
                logger.debug("Tesseract binary found", extra_data={"version": version})
        except Exception as exc:
            self._failures[name] = f"{type(exc).__name__}: {exc}"
            logger.warning(
                "Engine failed to load",
                extra_data={"engine": name, "error": self._failures[name]},
            )
            return

        self._modules[name] = module
        logger.info(
            "Engine loaded",
            extra_data={"engine": name, "module": _MODULES[name]},
        )

    def _apply_tesseract_paths(self, pytesseract: ModuleType) -> None:
        if self.ocr_config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.ocr_config.tesseract_cmd
        if self.ocr_config.tessdata_prefix:
            os.environ["TESSDATA_PREFIX"] = self.ocr_config.tessdata_prefix

    def apply_ocr_config(self, ocr_config: OCRConfig) -> None:
        """Switch the Tesseract command and tessdata location.

        Tesseract is loaded and probed again on next use under the new
        settings, and the installed-language cache is dropped.
        """
        with self._lock:
            self.ocr_config = ocr_config
            self._modules.pop(OCR_ENGINE, None)
            self._failures.pop(OCR_ENGINE, None)
            self._ocr_languages = None

    def is_available(self, name: str) -> bool:
        with self._lock:
            self._load(name)
            return name in self._modules

    def require(self, name: str) -> ModuleType:
        """Return the engine module or raise ``EngineUnavailableError``."""
        with self._lock:
            self._load(name)
            if name not in self._modules:
                raise EngineUnavailableError(name, self._failures.get(name, ""))
            return self._modules[name]

    def ocr_languages(self, requested: list[str]) -> list[str]:
        """Filter ``requested`` Tesseract language codes to the installed packs.

        Raises:
            EngineUnavailableError: If Tesseract is missing or none of the
                requested packs are installed.
        """
        pytesseract = self.require(OCR_ENGINE)
        with self._lock:
            if self._ocr_languages is None:
                self._ocr_languages = frozenset(pytesseract.get_languages(config=""))
            installed = self._ocr_languages
            usable = [code for code in requested if code in installed]
            missing = [code for code in requested if code not in installed]
            report = bool(missing) and not self._reported_missing.issuperset(missing)
            self._reported_missing.update(missing)

        if report:
            logger.warning(
                "Tesseract language packs missing",
                extra_data={"missing": "+".join(missing), "using": "+".join(usable)},
            )
        if not usable:
            raise EngineUnavailableError(
                OCR_ENGINE, f"none of the language packs {requested} are installed"
            )
        return usable


def _tesseract_paths(config: OCRConfig) -> tuple[str, Optional[str]]:
    return config.tesseract_cmd, config.tessdata_prefix


_registry: Optional[EngineRegistry] = None
_registry_lock = threading.Lock()


def get_registry(ocr_config: Optional[OCRConfig] = None) -> EngineRegistry:
    """Return the process-wide registry, creating it on first use.

    When ``ocr_config`` names a different Tesseract command or tessdata
    location than the existing registry uses, the new settings replace the
    old ones and a warning is logged.
    """
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = EngineRegistry(ocr_config)
        elif ocr_config is not None and _tesseract_paths(ocr_config) != _tesseract_paths(
            _registry.ocr_config
        ):
            logger.warning(
                "Replacing Tesseract settings of the shared engine registry",
                extra_data={
                    "previous_cmd": _registry.ocr_config.tesseract_cmd,
                    "tesseract_cmd": ocr_config.tesseract_cmd,
                    "previous_tessdata": _registry.ocr_config.tessdata_prefix,
                    "tessdata_prefix": ocr_config.tessdata_prefix,
                },
            )
            _registry.apply_ocr_config(ocr_config)
        return _registry


def reset_registry() -> None:
    """Drop the process-wide registry so the next call reloads engines."""
    global _registry
    with _registry_lock:
        _registry = None
