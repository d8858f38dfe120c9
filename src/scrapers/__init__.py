"""Scrapers for zhihu questions and their answers."""

from .answer import Answer, ContentContext, extract_answer
from .exceptions import (
    ZhihuError,
    InvalidQuestionLinkError,
    FetchError,
    DecodeError,
    NoMoreAnswersError,
)
from .question import Question
from .session import ZhihuSession, get_default_session
from .user import User, ANONYMOUS

__all__ = [
    "Answer",
    "ContentContext",
    "extract_answer",
    "Question",
    "User",
    "ANONYMOUS",
    "ZhihuSession",
    "get_default_session",
    "ZhihuError",
    "InvalidQuestionLinkError",
    "FetchError",
    "DecodeError",
    "NoMoreAnswersError",
]
