"""Exceptions raised while reading questions and answers.

Severity:
  - InvalidQuestionLinkError -> fatal, raised by the Question constructor.
  - FetchError and subclasses -> recoverable per remote answer page; the
    pagination loop logs them and moves on.
Parse and coercion problems never raise; they fall back to defaults.
"""

from typing import Optional


class ZhihuError(Exception):
    """Base exception for all zhihu-answers errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidQuestionLinkError(ZhihuError, ValueError):
    """Raised when a question link does not look like /question/<id>."""

    def __init__(self, link: str):
        super().__init__(f"Invalid question link: {link!r}", {"link": link})
        self.link = link


class FetchError(ZhihuError):
    """Raised when a page or answer batch cannot be fetched."""
    pass


class DecodeError(FetchError):
    """Raised when an answer batch response is not the expected JSON."""
    pass


class NoMoreAnswersError(FetchError):
    """Raised when a batch offset lies beyond the known answer count."""

    def __init__(self, offset: int, total: int):
        super().__init__(
            f"No more answers: offset {offset} exceeds total {total}",
            {"offset": offset, "total": total}
        )
        self.offset = offset
        self.total = total
