"""Email text normalization for the ReVision Outlook add-in."""

from .mail import EmailContent, InMemoryMailHost, MailHost, MailHostError, MailService, MailServiceError, ServiceResult
from .text_processor import (
    ProcessorConfig,
    TextProcessor,
    clean_text,
    convert_html_to_markdown,
    convert_text_to_html,
    has_translatable_content,
    is_safe_for_insertion,
    prepare_for_translation,
)

__all__ = [
    "EmailContent",
    "InMemoryMailHost",
    "MailHost",
    "MailHostError",
    "MailService",
    "MailServiceError",
    "ProcessorConfig",
    "ServiceResult",
    "TextProcessor",
    "clean_text",
    "convert_html_to_markdown",
    "convert_text_to_html",
    "has_translatable_content",
    "is_safe_for_insertion",
    "prepare_for_translation",
]
