"""
Text normalization for email content.

Turns raw email bodies (plain text or HTML) into clean text for translation
and AI analysis, and gates AI output before it goes back into a mail item.

Every function is total: non-string or empty input yields "" or False.
"""

import functools
import html as html_lib
import logging
import re
from dataclasses import dataclass, field

from .body_parser import ConverterConfig, build_converter, html_to_markdown

logger = logging.getLogger(__name__)

# ============================================================================
# Patterns
# ============================================================================

# A tag-like <...> that is not an angle-bracket URL or email address
HTML_TAG_PATTERN = re.compile(
    r"<(?!https?://|www\.)(?![\w.%+-]+@[\w.-]+\.[A-Za-z]{2,}>)/?[A-Za-z!][^>]*>"
)

LINE_ENDING_PATTERN = re.compile(r"\r\n|\r")
ESCAPED_MARKDOWN_PATTERN = re.compile(r"\\+([*_\-#])")
INLINE_SPACE_PATTERN = re.compile(r"[ \t]+")
TRAILING_SPACE_PATTERN = re.compile(r"[ \t]+\n")
EXCESS_NEWLINES_PATTERN = re.compile(r"\n{3,}")

ANGLE_URL_PATTERNS = [
    re.compile(r"<https?://[^>]+>"),
    re.compile(r"<www\.[^>]+>"),
    re.compile(r"<[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}>"),
]

MAX_PREPARE_PASSES = 8

LATIN_LETTER_PATTERN = re.compile(
    "[a-zA-Z\u00c0-\u00ff\u0100-\u017f\u0180-\u024f\u1e00-\u1eff]"
)

UNSAFE_PATTERNS = [
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"data:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
]


@dataclass(frozen=True)
class ProcessorConfig:
    converter: ConverterConfig = field(default_factory=ConverterConfig)
    min_content_length: int = 3
    # Latin-only matches the add-in's behaviour; CJK/Cyrillic/Arabic bodies fail the gate
    latin_letters_only: bool = True


def normalize_line_endings(text: str) -> str:
    return LINE_ENDING_PATTERN.sub("\n", text)


def looks_like_html(text: str) -> bool:
    return bool(HTML_TAG_PATTERN.search(text))


def _has_letter(text: str, latin_only: bool) -> bool:
    if latin_only:
        return bool(LATIN_LETTER_PATTERN.search(text))
    return any(ch.isalpha() for ch in text)


class TextProcessor:
    """
    Email text pipeline bound to one converter configuration.

    The markdown converter is built once in __init__ and reused for every
    call; it is never mutated afterwards, so an instance can be shared.
    """

    def __init__(self, config: ProcessorConfig | None = None):
        self.config = config or ProcessorConfig()
        self._converter = build_converter(self.config.converter)

    def convert_html_to_markdown(self, html: str) -> str:
        """Convert an HTML fragment to markdown-ish plain text."""
        if not html or not isinstance(html, str):
            return ""
        return html_to_markdown(html, self._converter, self.config.converter)

    def clean_text(self, text: str) -> str:
        """
        Clean whitespace while keeping line breaks.

        - Line endings become \\n
        - Escaped markdown characters (\\* \\_ \\- \\#) become plain
        - Runs of spaces/tabs become one space
        - Trailing spaces before a newline are dropped
        - At most one blank line between paragraphs
        """
        if not text or not isinstance(text, str):
            return ""

        text = normalize_line_endings(text)
        text = ESCAPED_MARKDOWN_PATTERN.sub(r"\1", text)
        text = INLINE_SPACE_PATTERN.sub(" ", text)
        text = TRAILING_SPACE_PATTERN.sub("\n", text)
        text = EXCESS_NEWLINES_PATTERN.sub("\n\n", text)
        return text.strip()

    def prepare_for_translation(self, text: str) -> str:
        """
        Prepare raw email content for translation.

        HTML is flattened to markdown and cleaned. Plain text is assumed to be
        well-formed already: only angle-bracket URLs/addresses are removed and
        the ends trimmed.

        Passes repeat until the text stops changing: removing a URL can expose
        a tag, and decoded entities (&lt;b&gt;) can turn into markup.
        """
        if not text or not isinstance(text, str):
            return ""

        for _ in range(MAX_PREPARE_PASSES):
            prepared = self._prepare_once(text)
            if prepared == text:
                break
            text = prepared
        else:
            logger.debug("prepare_for_translation did not settle")
        return text

    def _prepare_once(self, text: str) -> str:
        if looks_like_html(text):
            return self.clean_text(self.convert_html_to_markdown(text))

        text = normalize_line_endings(text)
        for pattern in ANGLE_URL_PATTERNS:
            # <<https://a>https://b> hides a second URL behind the first
            removed = 1
            while removed:
                text, removed = pattern.subn("", text)
        return text.strip()

    def has_translatable_content(self, text: str) -> bool:
        if not text or not isinstance(text, str):
            return False

        cleaned = text.strip()
        return (
            len(cleaned) >= self.config.min_content_length
            and _has_letter(cleaned, self.config.latin_letters_only)
        )

    def is_safe_for_insertion(self, text: str) -> bool:
        """Reject text carrying script, dangerous URL schemes or event handlers."""
        if not text or not isinstance(text, str):
            return False

        for pattern in UNSAFE_PATTERNS:
            if pattern.search(text):
                logger.debug(f"Unsafe content matched {pattern.pattern!r}")
                return False
        return True

    def convert_text_to_html(self, text: str) -> str:
        """Escape plain text for an HTML body, turning line breaks into <br>."""
        if not text or not isinstance(text, str):
            return ""

        escaped = html_lib.escape(normalize_line_endings(text), quote=True)
        return escaped.replace("&#x27;", "&#39;").replace("\n", "<br>")


@functools.lru_cache(maxsize=1)
def get_default_processor() -> TextProcessor:
    """Process-wide processor with the default configuration, built on first use."""
    return TextProcessor()


def convert_html_to_markdown(html: str) -> str:
    return get_default_processor().convert_html_to_markdown(html)


def clean_text(text: str) -> str:
    return get_default_processor().clean_text(text)


def prepare_for_translation(text: str) -> str:
    return get_default_processor().prepare_for_translation(text)


def has_translatable_content(text: str) -> bool:
    return get_default_processor().has_translatable_content(text)


def is_safe_for_insertion(text: str) -> bool:
    return get_default_processor().is_safe_for_insertion(text)


def convert_text_to_html(text: str) -> str:
    return get_default_processor().convert_text_to_html(text)
