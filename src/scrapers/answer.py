"""Answer records and the extractor that builds them from HTML fragments.

A fragment is either a ``div.zm-item-answer`` embedded in a question page
or a parsed snippet returned by the "load more" endpoint. Extraction does
no I/O: everything it needs is already in the fragment and the question's
page document.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Optional, Union, TYPE_CHECKING

from bs4 import BeautifulSoup, Comment, Doctype, Tag

from constants import SELECTORS, SELF_VIEW_MARKER
from scrapers.helpers import strip, make_zhihu_link, refine_upvote_num
from scrapers.user import User, AnonymousUser, ANONYMOUS

if TYPE_CHECKING:
    from scrapers.question import Question

logger = logging.getLogger("zhihu_answers")

Author = Union[User, AnonymousUser]

_BODY_MARKER = "zhihu-answer-body"


@dataclass(frozen=True)
class Answer:
    """One answer to a question."""

    link: str
    question: "Question" = field(compare=False, repr=False)
    author: Author
    upvote: int = 0
    content: str = ""

    def __str__(self) -> str:
        return f"<Answer: {self.author.id} - {self.link}>"


def _answer_root(fragment: Tag) -> Tag:
    """Return the element carrying the answer's own attributes.

    Page-embedded fragments are the answer div itself; fragments parsed
    from the list endpoint are documents wrapping it.
    """
    if 'zm-item-answer' in (fragment.get('class') or []):
        return fragment
    root = fragment.select_one(SELECTORS['answer'])
    return root if root is not None else fragment


def extract_author(fragment: Tag) -> Author:
    """Resolve the answer author, or ANONYMOUS when there is no author link."""
    author_info = fragment.select_one(SELECTORS['author_info'])
    author_link = None
    if author_info is not None:
        author_link = author_info.select_one(SELECTORS['author_link'])

    if author_link is None:
        return ANONYMOUS

    return User(
        link=make_zhihu_link(author_link.get('href')),
        id=strip(author_link.get_text())
    )


def extract_upvote(fragment: Tag) -> int:
    """Read the upvote count from whichever control the page rendered."""
    root = _answer_root(fragment)

    if root.get('data-isowner') == SELF_VIEW_MARKER:
        node = fragment.select_one(SELECTORS['self_vote'])
    else:
        node = None
        vote_bar = fragment.select_one(SELECTORS['vote_bar'])
        if vote_bar is not None:
            node = vote_bar.select_one(SELECTORS['vote_count'])

    if node is None:
        return 0
    return refine_upvote_num(node.get_text())


@dataclass(frozen=True)
class ContentContext:
    """Immutable shell of a question page that answer bodies are placed into.

    Built once from the page document; rendering an answer is plain string
    assembly, so one context can be shared by every worker of a call.
    """

    prefix: str
    suffix: str

    @classmethod
    def from_document(cls, base_doc: BeautifulSoup, base_url: str) -> "ContentContext":
        """Capture the page's doctype, ``<html>`` attributes and ``<head>``.

        A ``<base>`` element pointing at ``base_url`` is added when the head
        has none. ``base_doc`` is not modified.
        """
        shell = BeautifulSoup('', 'html.parser')

        for node in base_doc.contents:
            if isinstance(node, Doctype):
                shell.append(Doctype(str(node)))
                break

        source_html = base_doc.html
        html = shell.new_tag('html', attrs=dict(source_html.attrs) if source_html is not None else {})

        if base_doc.head is not None:
            head = copy.copy(base_doc.head)
        else:
            head = shell.new_tag('head')
        if head.find('base', href=True) is None:
            head.insert(0, shell.new_tag('base', href=base_url))

        source_body = base_doc.body
        body = shell.new_tag('body', attrs=dict(source_body.attrs) if source_body is not None else {})
        body.append(Comment(_BODY_MARKER))

        html.append(head)
        html.append(body)
        shell.append(html)

        prefix, suffix = str(shell).split(f"<!--{_BODY_MARKER}-->", 1)
        return cls(prefix=prefix, suffix=suffix)

    def render(self, content: Optional[Tag]) -> str:
        """Return a full document whose body holds ``content``."""
        return self.prefix + (str(content) if content is not None else "") + self.suffix


def restruct_answer_content(context: ContentContext, fragment: Tag) -> str:
    """Rebuild an answer body as a standalone HTML document.

    The answer content is placed into the question page's shell, so styles
    and the page's base context carry over. ``fragment`` is not modified.
    """
    content = fragment.select_one(SELECTORS['content'])
    if content is not None:
        content = copy.copy(content)

        for noscript in content.find_all('noscript'):
            noscript.decompose()

        # Images are lazy-loaded; the real source sits in a data attribute
        for img in content.find_all('img'):
            if 'origin_image' in (img.get('class') or []):
                src = img.get('data-original')
            else:
                src = img.get('data-actualsrc')
            if src:
                img['src'] = src

    return context.render(content)


def extract_answer(
    fragment: Tag,
    question: "Question",
    context: Optional[ContentContext] = None
) -> Answer:
    """Build an Answer from one answer fragment.

    Args:
        fragment: The answer's markup, from the page or the list endpoint.
        question: The owning question.
        context: Page shell used for the content; captured from the
            question's page document when omitted. Pass one context to
            every answer of a batch to avoid re-reading the page.

    Returns:
        Answer with link, author, upvote count and standalone content.
    """
    if context is None:
        context = ContentContext.from_document(question.doc, question.link)

    link_node = fragment.select_one(SELECTORS['answer_link'])
    link = make_zhihu_link(link_node.get('href')) if link_node is not None else ""
    if not link:
        logger.debug(f"Answer without permalink on {question.link}")

    return Answer(
        link=link,
        question=question,
        author=extract_author(fragment),
        upvote=extract_upvote(fragment),
        content=restruct_answer_content(context, fragment),
    )
