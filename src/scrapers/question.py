"""Zhihu questions: scalar page fields and top-N answer retrieval."""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from constants import PAGE_SIZE, SELECTORS, DEFAULT_MAX_WORKERS
from scrapers.answer import Answer, ContentContext, extract_answer
from scrapers.exceptions import InvalidQuestionLinkError, NoMoreAnswersError, ZhihuError
from scrapers.helpers import strip, parse_int, valid_question_url, question_url_token
from scrapers.session import ZhihuSession, get_default_session

logger = logging.getLogger("zhihu_answers")


@dataclass
class QuestionFields:
    """Lazily computed scalar fields of a question page.

    None means "not read yet"; every computed value is non-None.
    """

    detail: Optional[str] = None
    answers_num: Optional[int] = None
    followers_num: Optional[int] = None
    topics: Optional[List[str]] = None
    visit_times: Optional[int] = None


class Question:
    """A zhihu question.

    The page is fetched on first use and each scalar field is read from it
    at most once. Build a new instance to see fresh data.
    """

    def __init__(
        self,
        link: str,
        title: str = "",
        session: Optional[ZhihuSession] = None,
        max_workers: int = DEFAULT_MAX_WORKERS
    ):
        """Initialize the question.

        Args:
            link: Question link, e.g. https://www.zhihu.com/question/23759686.
            title: Known title; scraped from the page when empty.
            session: Session used for fetching; defaults to the shared one.
            max_workers: Upper bound on concurrent "load more" requests.

        Raises:
            InvalidQuestionLinkError: If link is not a question link.
        """
        if not valid_question_url(link):
            raise InvalidQuestionLinkError(link)

        self.link = link
        self.url_token = question_url_token(link)
        self.max_workers = max(1, max_workers)
        self._title = title
        self._session = session
        self._doc: Optional[BeautifulSoup] = None
        self.fields = QuestionFields()

    @property
    def session(self) -> ZhihuSession:
        if self._session is None:
            self._session = get_default_session()
        return self._session

    @property
    def doc(self) -> BeautifulSoup:
        """The question page, fetched once. Treat as read-only."""
        if self._doc is None:
            self._doc = self.session.get_document(self.link)
        return self._doc

    @property
    def title(self) -> str:
        if not self._title:
            self._title = strip(self._select_text(SELECTORS['title']))
        return self._title

    @property
    def detail(self) -> str:
        if self.fields.detail is None:
            self.fields.detail = strip(self._select_text(SELECTORS['detail']))
        return self.fields.detail

    @property
    def answers_num(self) -> int:
        if self.fields.answers_num is None:
            self.fields.answers_num = parse_int(self._select_attr(SELECTORS['answers_num'], 'data-num'))
        return self.fields.answers_num

    @property
    def followers_num(self) -> int:
        if self.fields.followers_num is None:
            self.fields.followers_num = parse_int(self._select_text(SELECTORS['followers_num']))
        return self.fields.followers_num

    @property
    def topics(self) -> List[str]:
        if self.fields.topics is None:
            self.fields.topics = [
                strip(node.get_text()) for node in self.doc.select(SELECTORS['topics'])
            ]
        return list(self.fields.topics)

    @property
    def visit_times(self) -> int:
        if self.fields.visit_times is None:
            self.fields.visit_times = parse_int(self._select_attr(SELECTORS['visit_times'], 'content'))
        return self.fields.visit_times

    def _select_text(self, selector: str) -> str:
        node = self.doc.select_one(selector)
        return node.get_text() if node is not None else ""

    def _select_attr(self, selector: str, attr: str) -> Optional[str]:
        node = self.doc.select_one(selector)
        return node.get(attr) if node is not None else None

    def get_top_x_answers(self, x: int) -> List[Answer]:
        """Return the first x answers in page order.

        Answers embedded in the page come first; the rest are loaded from
        the "load more" endpoint, one request per extra page. A page that
        fails is logged and skipped, so the result may be shorter than x.

        Args:
            x: Number of answers wanted.

        Returns:
            At most min(x, answers_num) answers.
        """
        total = self.answers_num
        x = max(0, min(x, total))
        if x == 0:
            return []

        context = ContentContext.from_document(self.doc, self.link)

        answers = self._get_answers_on_index(context)
        if x <= len(answers):
            return answers[:x]

        more_count = max(x - PAGE_SIZE, 0)
        if more_count > 0:
            answers.extend(self._get_more_answers(more_count, total, context))

        return answers[:x]

    def get_all_answers(self) -> List[Answer]:
        return self.get_top_x_answers(self.answers_num)

    def get_top_answer(self) -> Optional[Answer]:
        top_answers = self.get_top_x_answers(1)
        return top_answers[0] if top_answers else None

    def _get_answers_on_index(self, context: Optional[ContentContext] = None) -> List[Answer]:
        """Extract the answers embedded in the question page."""
        doc = self.doc
        if context is None:
            context = ContentContext.from_document(doc, self.link)
        return [extract_answer(fragment, self, context) for fragment in doc.select(SELECTORS['answer'])]

    def _get_answers_by_ajax(
        self,
        page: int,
        total: int,
        xsrf: str,
        context: Optional[ContentContext] = None
    ) -> List[Answer]:
        """Load and extract one page of answers from the list endpoint.

        Raises:
            NoMoreAnswersError: If the page starts beyond ``total``.
            FetchError: If the request or its decoding fails.
        """
        offset = page * PAGE_SIZE
        if offset > total:
            raise NoMoreAnswersError(offset, total)

        fragments = self.session.get_answer_batch(self.link, self.url_token, page, PAGE_SIZE, xsrf)

        if context is None:
            context = ContentContext.from_document(self.doc, self.link)
        return [
            extract_answer(BeautifulSoup(fragment, 'html.parser'), self, context)
            for fragment in fragments
        ]

    def _get_more_answers(self, limit: int, total: int, context: ContentContext) -> List[Answer]:
        """Load ``limit`` answers beyond the first page.

        Pages are fetched concurrently; each result lands in its own slot
        and the slots are joined in page order. A page without a slot
        failed and has already been logged.
        """
        total_pages = math.ceil(limit / PAGE_SIZE)
        pages = range(1, total_pages + 1)
        xsrf = self.session.get_xsrf(self.doc)

        results: Dict[int, List[Answer]] = {}

        def load_page(page: int) -> None:
            try:
                results[page] = self._get_answers_by_ajax(page, total, xsrf, context)
            except ZhihuError as e:
                logger.error(f"Failed to load answer page {page} of question {self.link}: {e}")

        workers = min(self.max_workers, total_pages)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # list() re-raises anything unexpected from a worker
            list(executor.map(load_page, pages))

        failed = sorted(set(pages) - results.keys())
        if failed:
            logger.debug(f"Skipped answer pages {failed} of {self.link}")

        answers = []
        for page in pages:
            answers.extend(results.get(page, []))
        return answers

    def __str__(self) -> str:
        return f"<Question: {self.title} - {self.link}>"

    def __repr__(self) -> str:
        return f"Question({self.link!r})"
