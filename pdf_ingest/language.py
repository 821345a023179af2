"""Heuristic language detection for extracted text."""

import re

DEFAULT_LANGUAGE = "en"
DEFAULT_SAMPLE_SIZE = 1000

# Checked in order; the first match wins.
_SCRIPT_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("te", re.compile(r"[\u0c00-\u0c7f]")),
    ("hi", re.compile(r"[\u0900-\u097f]")),
    ("ar", re.compile(r"[\u0600-\u06ff]")),
    ("zh", re.compile(r"[\u4e00-\u9fff]")),
    ("ja", re.compile(r"[\u3040-\u309f\u30a0-\u30ff]")),
    ("ko", re.compile(r"[\uac00-\ud7af]")),
    ("ru", re.compile(r"[\u0430-\u044f\u0451]")),
]

# Stop words that also occur in ordinary English text ("in", "die", "et al.")
# are left out so English prose falls through to the default.
_STOPWORD_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("es", re.compile(r"\b(el|los|las|del|una|por|para|pero|muy|está|están)\b")),
    ("fr", re.compile(r"\b(le|les|des|est|sont|dans|pour|avec|une)\b")),
    ("de", re.compile(r"\b(der|das|und|ist|sind|auf|für|nicht|mit|eine)\b")),
]

SUPPORTED_LANGUAGES = frozenset(
    [code for code, _ in _SCRIPT_PATTERNS]
    + [code for code, _ in _STOPWORD_PATTERNS]
    + [DEFAULT_LANGUAGE]
)


def detect_language(text: str, sample_size: int = DEFAULT_SAMPLE_SIZE) -> str:
    """Return a language code for ``text``.

    Only the first ``sample_size`` characters are inspected. Script checks
    (Telugu, Devanagari, Arabic, CJK, kana, Hangul, Cyrillic) run before the
    Spanish/French/German stop-word checks; anything else is English.
    """
    sample = (text or "")[:sample_size].lower()
    if not sample.strip():
        return DEFAULT_LANGUAGE

    for code, pattern in _SCRIPT_PATTERNS:
        if pattern.search(sample):
            return code
    for code, pattern in _STOPWORD_PATTERNS:
        if pattern.search(sample):
            return code
    return DEFAULT_LANGUAGE
