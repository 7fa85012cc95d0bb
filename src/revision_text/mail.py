"""
Mail item access for the ReVision pipeline.

MailService wraps a MailHost (the Outlook item, or an in-memory stand-in)
and runs bodies through the TextProcessor on the way out and the safety
gate on the way in. Host failures come back as ServiceResult errors.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Literal, Protocol, TypeVar

from pydantic import BaseModel

from .text_processor import TextProcessor, get_default_processor

logger = logging.getLogger(__name__)

BodyFormat = Literal["text", "html"]

# Classic desktop Outlook edits plain text; every other host edits HTML
CLASSIC_OUTLOOK_HOST = "Outlook"

T = TypeVar("T")


class MailHostError(Exception):
    """Raised by a MailHost when the underlying mail item call fails."""


class MailServiceError(str, Enum):
    NOT_AVAILABLE = "Service not available"
    OPERATION_FAILED = "Operation failed"
    NO_TRANSLATABLE_CONTENT = "No translatable content found in email"
    UNSAFE_CONTENT = "Content is not safe for insertion"


class EmailContent(BaseModel):
    full_body: str
    format: BodyFormat
    processed_text: str | None = None  # Cleaned text ready for translation


class ServiceResult(BaseModel, Generic[T]):
    success: bool
    data: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> "ServiceResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ServiceResult[T]":
        return cls(success=False, error=error)


class MailHost(Protocol):
    host_name: str

    def get_body(self, format: BodyFormat) -> str: ...

    def set_body(self, text: str, format: BodyFormat) -> None: ...

    def set_selection(self, text: str, format: BodyFormat) -> None: ...


@dataclass
class InMemoryMailHost:
    """Mail host backed by a string. Records writes; can be told to fail."""
    body: str = ""
    host_name: str = CLASSIC_OUTLOOK_HOST
    fail_reads: bool = False
    fail_writes: bool = False
    insertions: list[tuple[str, BodyFormat]] = field(default_factory=list)
    body_format: BodyFormat = "text"

    def get_body(self, format: BodyFormat) -> str:
        if self.fail_reads:
            raise MailHostError("Failed to get email body")
        return self.body

    def set_body(self, text: str, format: BodyFormat) -> None:
        if self.fail_writes:
            raise MailHostError("Failed to replace email body")
        self.body = text
        self.body_format = format

    def set_selection(self, text: str, format: BodyFormat) -> None:
        if self.fail_writes:
            raise MailHostError("Failed to insert text")
        self.insertions.append((text, format))


class MailService:
    def __init__(self, host: MailHost | None, processor: TextProcessor | None = None):
        self.host = host
        self.processor = processor or get_default_processor()

    def is_available(self) -> bool:
        return self.host is not None

    def is_web_based(self) -> bool:
        return self.host is not None and self.host.host_name != CLASSIC_OUTLOOK_HOST

    def get_email_body(self, format: BodyFormat = "text") -> ServiceResult[str]:
        if not self.is_available():
            return ServiceResult.fail(MailServiceError.NOT_AVAILABLE.value)

        try:
            return ServiceResult.ok(self.host.get_body(format) or "")
        except MailHostError as e:
            logger.error(f"Failed to get email body: {e}")
            return ServiceResult.fail(str(e) or MailServiceError.OPERATION_FAILED.value)

    def get_email_content(self, format: BodyFormat = "text") -> ServiceResult[EmailContent]:
        body_result = self.get_email_body(format)
        if not body_result.success:
            return ServiceResult.fail(body_result.error or MailServiceError.OPERATION_FAILED.value)

        full_body = body_result.data or ""
        return ServiceResult.ok(EmailContent(
            full_body=full_body,
            format=format,
            processed_text=self.processor.prepare_for_translation(full_body),
        ))

    def get_processed_text_for_translation(self, format: BodyFormat = "html") -> ServiceResult[str]:
        """Fetch the body and return it cleaned, or an error if nothing is translatable."""
        body_result = self.get_email_body(format)
        if not body_result.success:
            return ServiceResult.fail(body_result.error or MailServiceError.OPERATION_FAILED.value)

        raw_text = body_result.data or ""
        processed = self.processor.prepare_for_translation(raw_text)

        if not self.processor.has_translatable_content(processed):
            return ServiceResult.fail(MailServiceError.NO_TRANSLATABLE_CONTENT.value)

        logger.debug(
            f"Processed text for translation: {len(raw_text)} -> {len(processed)} chars ({format})"
        )
        return ServiceResult.ok(processed)

    def insert_text(self, text: str) -> ServiceResult[None]:
        """
        Insert AI output at the cursor, replacing any selection.

        Web-based hosts get HTML with <br> line breaks; classic Outlook gets
        the plain text as-is.
        """
        if not self.is_available():
            return ServiceResult.fail(MailServiceError.NOT_AVAILABLE.value)

        if not self.processor.is_safe_for_insertion(text):
            logger.warning("Refusing to insert unsafe content")
            return ServiceResult.fail(MailServiceError.UNSAFE_CONTENT.value)

        if self.is_web_based():
            content, format = self.processor.convert_text_to_html(text), "html"
        else:
            content, format = text, "text"
        logger.debug(f"Inserting as {format} for host {self.host.host_name!r}")

        try:
            self.host.set_selection(content, format)
        except MailHostError as e:
            logger.error(f"Failed to insert text: {e}")
            return ServiceResult.fail(str(e) or MailServiceError.OPERATION_FAILED.value)
        return ServiceResult.ok()

    def replace_email_body(self, text: str, format: BodyFormat = "text") -> ServiceResult[None]:
        if not self.is_available():
            return ServiceResult.fail(MailServiceError.NOT_AVAILABLE.value)

        if not self.processor.is_safe_for_insertion(text):
            logger.warning("Refusing to replace body with unsafe content")
            return ServiceResult.fail(MailServiceError.UNSAFE_CONTENT.value)

        try:
            self.host.set_body(text, format)
        except MailHostError as e:
            logger.error(f"Failed to replace email body: {e}")
            return ServiceResult.fail(str(e) or MailServiceError.OPERATION_FAILED.value)
        return ServiceResult.ok()
