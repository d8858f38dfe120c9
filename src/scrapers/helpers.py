"""Small text and link helpers shared by the zhihu scrapers."""

import re
from decimal import Decimal, InvalidOperation, localcontext
from typing import Optional

from constants import ZHIHU_URL, UPVOTE_SUFFIXES

QUESTION_URL_PATTERN = re.compile(r'^https?://www\.zhihu\.com/question/(\d+)$')

_NUMBER_PATTERN = re.compile(r'^(\d+(?:\.\d+)?)\s*([^\d\s]*)$')


def strip(text: Optional[str]) -> str:
    """Trim surrounding whitespace; None becomes an empty string."""
    if not text:
        return ""
    return text.strip()


def make_zhihu_link(href: Optional[str]) -> str:
    """Make a site-relative href absolute.

    Absolute links pass through unchanged and an empty href stays empty.
    """
    href = strip(href)
    if not href:
        return ""
    if href.startswith("//"):
        return f"https:{href}"
    if href.startswith("/"):
        return f"{ZHIHU_URL}{href}"
    return href


def valid_question_url(link: str) -> bool:
    """Check that link looks like https://www.zhihu.com/question/<digits>."""
    if not isinstance(link, str):
        return False
    return QUESTION_URL_PATTERN.match(link) is not None


def question_url_token(link: str) -> int:
    """Return the numeric question id from a valid question link."""
    match = QUESTION_URL_PATTERN.match(link)
    if not match:
        raise ValueError(f"Not a question link: {link!r}")
    return int(match.group(1))


def parse_int(text: Optional[str], default: int = 0) -> int:
    """Parse a plain integer, ignoring whitespace and thousands separators."""
    cleaned = strip(text).replace(",", "")
    try:
        return int(cleaned)
    except ValueError:
        return default


def refine_upvote_num(text: Optional[str]) -> int:
    """Turn a displayed upvote count into an integer.

    Handles "42", "1,024", "3K", "1.5k", "2W" and "2万". Anything else,
    including negative numbers, gives 0.
    """
    cleaned = strip(text).replace(",", "")
    match = _NUMBER_PATTERN.match(cleaned)
    if not match:
        return 0

    number, suffix = match.groups()
    multiplier = 1
    if suffix:
        multiplier = UPVOTE_SUFFIXES.get(suffix.lower())
        if multiplier is None:
            return 0

    # Enough precision to keep every digit of the displayed count
    with localcontext() as ctx:
        ctx.prec = len(number) + 8
        try:
            return int(Decimal(number) * multiplier)
        except InvalidOperation:
            return 0
