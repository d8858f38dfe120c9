"""RSS feed generation for a question's answers using feedgen."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, TYPE_CHECKING
from urllib.parse import urljoin

import bleach
from bs4 import BeautifulSoup
from feedgen.feed import FeedGenerator

if TYPE_CHECKING:
    from scrapers.answer import Answer
    from scrapers.question import Question

logger = logging.getLogger("zhihu_answers")


def answer_body_html(content: str) -> str:
    """Return the inner HTML of an answer document's body.

    Relative links and image sources are made absolute against the
    document's ``<base href>`` so they survive outside the page.
    """
    if not content:
        return ""

    soup = BeautifulSoup(content, 'html.parser')
    base = soup.find('base', href=True)
    base_url = base['href'] if base is not None else ""

    if base_url:
        for tag, attr in (('a', 'href'), ('img', 'src')):
            for node in soup.find_all(tag):
                if node.get(attr):
                    node[attr] = urljoin(base_url, node[attr])

    body = soup.body
    if body is None:
        return str(soup)
    return body.decode_contents()


class AnswerFeedBuilder:
    """Generate an RSS feed from a question's answers."""

    ALLOWED_TAGS = ['p', 'br', 'strong', 'em', 'b', 'i', 'ul', 'ol', 'li',
                    'a', 'img', 'blockquote', 'pre', 'code', 'h3']
    ALLOWED_ATTRIBUTES = {'a': ['href', 'title'], 'img': ['src', 'alt']}

    def __init__(self, question: "Question", language: str = "zh-cn"):
        """Initialize the feed builder.

        Args:
            question: Question whose answers the feed lists.
            language: Feed language code.
        """
        self.question = question
        self.title = question.title or question.link
        self.link = question.link
        self.description = question.detail or self.title

        self.fg = FeedGenerator()
        self.fg.title(self.title)
        self.fg.link(href=self.link, rel="alternate")
        self.fg.description(self.description)
        self.fg.language(language)
        self.fg.lastBuildDate(datetime.now(timezone.utc))

        logger.debug(f"AnswerFeedBuilder initialized for {self.link}")

    def sanitize_html(self, content: str) -> str:
        """Remove scripts and markup outside the allowed set."""
        if not content:
            return ""
        return bleach.clean(
            content,
            tags=self.ALLOWED_TAGS,
            attributes=self.ALLOWED_ATTRIBUTES,
            strip=True
        )

    def add_answer(self, answer: "Answer", position: int) -> None:
        """Add one answer as a feed entry.

        Args:
            answer: Answer to add.
            position: 1-based rank, used for the guid when the answer has
                no permalink.
        """
        entry = self.fg.add_entry(order='append')
        entry.title(f"{answer.author.id} ({answer.upvote} upvotes)")
        entry.link(href=answer.link or self.link)
        entry.description(self.sanitize_html(answer_body_html(answer.content)))

        if answer.link:
            entry.guid(answer.link, permalink=True)
        else:
            entry.guid(f"{self.link}#{position}", permalink=False)

    def create_feed(self, answers: Optional[List["Answer"]] = None) -> str:
        """Generate RSS 2.0 XML for the given answers, kept in rank order."""
        answers = [answer for answer in (answers or []) if answer is not None]

        for position, answer in enumerate(answers, start=1):
            self.add_answer(answer, position)

        logger.info(f"Created feed with {len(answers)} answers for {self.link}")
        return self.fg.rss_str(pretty=True).decode("utf-8")

    def save_feed(self, output_path: str) -> None:
        """Write the RSS XML to a file, creating parent directories."""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        rss_content = self.fg.rss_str(pretty=True).decode("utf-8")
        path.write_text(rss_content, encoding="utf-8")

        logger.info(f"RSS feed saved to {output_path}")
