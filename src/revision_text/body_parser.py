"""
Email body parsing - HTML to translation-ready markdown.

Links keep only their text, images collapse to an alt-text marker,
block elements end in a single newline. Whitespace cleanup lives in
text_processor.clean_text.
"""

import html as html_lib
import logging
import re
from dataclasses import dataclass

from bs4.exceptions import ParserRejectedMarkup
from markdownify import ATX, MarkdownConverter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConverterConfig:
    """Options for the HTML -> markdown converter. Built once, never mutated."""
    heading_style: str = ATX
    bullets: str = "-"
    strong_em_symbol: str = "*"
    line_break_placeholder: str = "XXLINEBREAKXX"  # must survive markdown escaping
    strip_comments: bool = True


HTML_COMMENT_PATTERN = re.compile(r"<!--[\s\S]*?-->")
# Word/Outlook downlevel-revealed conditionals: <![if !supportLists]> ... <![endif]>
CONDITIONAL_SECTION_PATTERN = re.compile(r"<!\[(?:if|endif|else)[^\]]*\]>", re.IGNORECASE)
RAW_LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")
ESCAPED_ASTERISK_PATTERN = re.compile(r"\\(\*)")


class EmailMarkdownConverter(MarkdownConverter):
    """MarkdownConverter with email-specific rules."""

    def convert_a(self, el, text, parent_tags):
        return text

    def convert_img(self, el, text, parent_tags):
        alt = el.attrs.get("alt")
        return f"[Image: {alt}]" if alt else "[Image]"

    def convert_script(self, el, text, parent_tags):
        return ""

    def convert_style(self, el, text, parent_tags):
        return ""

    def convert_br(self, el, text, parent_tags):
        return "\n"

    def _block_with_newline(self, el, text, parent_tags):
        return text + "\n"

    convert_p = _block_with_newline
    convert_div = _block_with_newline

    # Tables are flattened, one cell/row per line
    convert_table = _block_with_newline
    convert_tr = _block_with_newline
    convert_td = _block_with_newline
    convert_th = _block_with_newline


SCRIPT_STYLE_PATTERN = re.compile(r"<(script|style)\b[^>]*>[\s\S]*?</\1\s*>", re.IGNORECASE)
IMG_ALT_PATTERN = re.compile(r"<img\b[^>]*?\balt\s*=\s*[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE)
IMG_PATTERN = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
BLOCK_BREAK_PATTERN = re.compile(r"<br\s*/?>|</(?:p|div|table|tr|td|th|li|h[1-6])\s*>", re.IGNORECASE)
ANY_TAG_PATTERN = re.compile(r"<[^>]*>")
UNCLOSED_TAG_PATTERN = re.compile(r"<[!/A-Za-z][^>]*$")


def strip_tags(html: str, line_break: str = "\n") -> str:
    """Best-effort text for markup the parser rejects: drop tags, keep block breaks."""
    text = SCRIPT_STYLE_PATTERN.sub("", html)
    text = IMG_ALT_PATTERN.sub(r"[Image: \1]", text)
    text = IMG_PATTERN.sub("[Image]", text)
    text = BLOCK_BREAK_PATTERN.sub(line_break, text)
    text = ANY_TAG_PATTERN.sub("", text)
    text = UNCLOSED_TAG_PATTERN.sub("", text)
    return html_lib.unescape(text)


def build_converter(config: ConverterConfig) -> EmailMarkdownConverter:
    return EmailMarkdownConverter(
        heading_style=config.heading_style,
        bullets=config.bullets,
        strong_em_symbol=config.strong_em_symbol,
    )


def html_to_markdown(html: str, converter: EmailMarkdownConverter, config: ConverterConfig) -> str:
    """
    Convert an HTML email body to markdown.

    Raw line breaks inside the HTML are swapped for a placeholder first so
    the converter's whitespace collapsing does not eat them, then restored.
    """
    if not html or not isinstance(html, str):
        return ""

    if config.strip_comments:
        # Outlook bodies carry CSS and conditional blocks in comments
        html = HTML_COMMENT_PATTERN.sub("", html)
        html = CONDITIONAL_SECTION_PATTERN.sub("", html)

    placeholder = config.line_break_placeholder
    html = RAW_LINE_BREAK_PATTERN.sub(placeholder, html)

    try:
        markdown = converter.convert(html)
    except (ParserRejectedMarkup, RecursionError) as e:
        logger.warning(f"HTML conversion failed, falling back to tag stripping: {e!r}")
        markdown = strip_tags(html, placeholder)

    markdown = markdown.replace(placeholder, "\n")
    markdown = ESCAPED_ASTERISK_PATTERN.sub(r"\1", markdown)

    return markdown
