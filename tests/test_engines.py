"""
Engine Registry Tests
"""
import importlib
import logging
from types import SimpleNamespace

import pytest

from pdf_ingest.config import OCRConfig
from pdf_ingest.engines import OCR_ENGINE, PDF_ENGINE, EngineRegistry, get_registry
from pdf_ingest.exceptions import EngineUnavailableError


def fake_pytesseract(languages=("eng", "deu", "osd")):
    return SimpleNamespace(
        pytesseract=SimpleNamespace(tesseract_cmd="tesseract"),
        get_tesseract_version=lambda: "5.3.0",
        get_languages=lambda config="": list(languages),
    )


@pytest.fixture
def patched_import(monkeypatch):
    """Route the pytesseract import to a fake module."""
    real_import = importlib.import_module
    replacements = {}

    def import_module(name, *args, **kwargs):
        if name in replacements:
            replacement = replacements[name]
            if isinstance(replacement, Exception):
                raise replacement
            return replacement
        return real_import(name, *args, **kwargs)

    monkeypatch.setattr("pdf_ingest.engines.importlib.import_module", import_module)
    return replacements


class TestEngineRegistry:
    """Test lazy engine loading"""

    def test_pymupdf_available(self):
        registry = EngineRegistry()
        assert registry.is_available(PDF_ENGINE)
        assert registry.require(PDF_ENGINE).__name__ == "fitz"

    def test_unknown_engine(self):
        with pytest.raises(KeyError):
            EngineRegistry().require("ghostscript")

    def test_missing_engine_raises_and_is_cached(self, patched_import):
        patched_import["pytesseract"] = ImportError("No module named 'pytesseract'")
        registry = EngineRegistry()

        assert registry.is_available(OCR_ENGINE) is False
        with pytest.raises(EngineUnavailableError) as exc_info:
            registry.require(OCR_ENGINE)
        assert exc_info.value.engine == OCR_ENGINE

        # A later fix to the environment is not picked up by the same registry
        patched_import["pytesseract"] = fake_pytesseract()
        assert registry.is_available(OCR_ENGINE) is False

    def test_configures_tesseract_command(self, patched_import):
        module = fake_pytesseract()
        patched_import["pytesseract"] = module
        registry = EngineRegistry(OCRConfig(tesseract_cmd="/opt/tesseract/bin/tesseract"))

        assert registry.require(OCR_ENGINE) is module
        assert module.pytesseract.tesseract_cmd == "/opt/tesseract/bin/tesseract"

    def test_missing_binary_marks_unavailable(self, patched_import):
        module = fake_pytesseract()

        def no_binary():
            raise OSError("tesseract is not installed or it's not in your PATH")

        module.get_tesseract_version = no_binary
        patched_import["pytesseract"] = module

        assert EngineRegistry().is_available(OCR_ENGINE) is False

    def test_ocr_languages_filtered(self, patched_import):
        patched_import["pytesseract"] = fake_pytesseract(("eng", "deu"))
        registry = EngineRegistry()

        assert registry.ocr_languages(["eng", "tel", "deu"]) == ["eng", "deu"]

    def test_missing_packs_reported_once(self, patched_import, caplog):
        patched_import["pytesseract"] = fake_pytesseract(("eng",))
        registry = EngineRegistry()

        with caplog.at_level(logging.WARNING, logger="pdf_ingest.engines"):
            registry.ocr_languages(["eng", "tel"])
            registry.ocr_languages(["eng", "tel"])

        assert caplog.text.count("Tesseract language packs missing") == 1

    def test_ocr_languages_none_installed(self, patched_import):
        patched_import["pytesseract"] = fake_pytesseract(("osd",))
        with pytest.raises(EngineUnavailableError):
            EngineRegistry().ocr_languages(["eng"])

    def test_process_wide_registry(self):
        assert get_registry() is get_registry()


class TestSharedRegistryConfig:
    """Test OCR settings on the process-wide registry"""

    def test_later_tesseract_settings_replace_earlier_ones(self, caplog):
        first = get_registry()
        custom = OCRConfig(tesseract_cmd="/opt/custom/tesseract", tessdata_prefix="/opt/tessdata")

        with caplog.at_level(logging.WARNING, logger="pdf_ingest.engines"):
            second = get_registry(custom)

        assert second is first
        assert second.ocr_config.tesseract_cmd == "/opt/custom/tesseract"
        assert second.ocr_config.tessdata_prefix == "/opt/tessdata"
        assert "Replacing Tesseract settings" in caplog.text

    def test_same_settings_do_not_warn(self, caplog):
        get_registry(OCRConfig(max_workers=1))
        with caplog.at_level(logging.WARNING, logger="pdf_ingest.engines"):
            get_registry(OCRConfig(max_workers=5))
            get_registry()
        assert caplog.text == ""

    def test_extractor_config_reaches_registry(self):
        from pdf_ingest.config import ExtractionConfig
        from pdf_ingest.orchestrator import PDFContentExtractor

        PDFContentExtractor()
        config = ExtractionConfig(ocr=OCRConfig(tesseract_cmd="/opt/custom/tesseract"))
        extractor = PDFContentExtractor(config=config)

        assert extractor.registry.ocr_config.tesseract_cmd == "/opt/custom/tesseract"

    def test_reloads_tesseract_with_new_command(self, patched_import):
        patched_import["pytesseract"] = ImportError("No module named 'pytesseract'")
        registry = get_registry()
        assert registry.is_available(OCR_ENGINE) is False

        module = fake_pytesseract()
        patched_import["pytesseract"] = module
        get_registry(OCRConfig(tesseract_cmd="/usr/local/bin/tesseract"))

        assert registry.require(OCR_ENGINE) is module
        assert module.pytesseract.tesseract_cmd == "/usr/local/bin/tesseract"
