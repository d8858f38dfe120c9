"""HTTP session for zhihu.com pages and the answer list endpoint."""

import json
import logging
import os
from http.cookiejar import MozillaCookieJar, LoadError
from pathlib import Path
from typing import List, Optional

import requests
from bs4 import BeautifulSoup

from constants import ANSWER_LIST_URL, USER_AGENT, DEFAULT_TIMEOUT, SELECTORS
from scrapers.exceptions import FetchError, DecodeError

logger = logging.getLogger("zhihu_answers")


class ZhihuSession:
    """Fetch question pages and "load more" answer batches.

    Authentication is cookie based: export the cookies of a logged-in
    browser session to a Mozilla/Netscape cookie file and pass its path.
    """

    def __init__(
        self,
        cookies_file: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
        user_agent: str = USER_AGENT
    ):
        """Initialize the session.

        Args:
            cookies_file: Optional Mozilla-format cookie file to load.
            timeout: Request timeout in seconds.
            user_agent: User-Agent header sent with every request.
        """
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent,
            "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
        })

        if cookies_file:
            self.load_cookies(cookies_file)

    def load_cookies(self, cookies_file: str) -> int:
        """Load cookies from a Mozilla-format cookie file.

        Returns:
            Number of cookies loaded.

        Raises:
            FileNotFoundError: If the file does not exist.
            http.cookiejar.LoadError: If the file is not a cookie file.
        """
        path = Path(cookies_file).expanduser()
        jar = MozillaCookieJar(str(path))
        try:
            jar.load(ignore_discard=True, ignore_expires=True)
        except LoadError as e:
            logger.error(f"Failed to load cookies from {path}: {e}")
            raise

        for cookie in jar:
            self.session.cookies.set_cookie(cookie)
        logger.info(f"Loaded {len(jar)} cookies from {path}")
        return len(jar)

    def get_document(self, link: str) -> BeautifulSoup:
        """Fetch a page and parse it.

        Raises:
            FetchError: On any transport or HTTP status failure.
        """
        logger.debug(f"Fetching {link}")
        try:
            response = self.session.get(link, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch {link}: {e}", {"link": link}) from e

        return BeautifulSoup(response.text, 'html.parser')

    def get_xsrf(self, doc: Optional[BeautifulSoup] = None) -> str:
        """Return the anti-forgery token for ajax requests.

        Read from the page form when a document is given, otherwise from the
        ``_xsrf`` cookie. Missing token gives an empty string.
        """
        if doc is not None:
            node = doc.select_one(SELECTORS['xsrf'])
            if node is not None and node.get('value'):
                return node['value']
        return self.session.cookies.get('_xsrf') or ""

    def get_answer_batch(
        self,
        question_link: str,
        url_token: int,
        page: int,
        page_size: int,
        xsrf: str
    ) -> List[str]:
        """Fetch one "load more" batch of answer fragments.

        Args:
            question_link: Question page link, sent as the Referer.
            url_token: Numeric question id.
            page: 1-based page index; the offset is ``page * page_size``.
            page_size: Answers per batch.
            xsrf: Anti-forgery token.

        Returns:
            Raw HTML strings, one per answer.

        Raises:
            FetchError: On transport failure or a non-zero status code.
            DecodeError: When the response is not the expected JSON.
        """
        offset = page * page_size
        params = json.dumps({
            "url_token": url_token,
            "pagesize": page_size,
            "offset": offset,
        })
        form = {
            "_xsrf": xsrf,
            "method": "next",
            "params": params,
        }
        headers = {
            "Referer": question_link,
            "X-Requested-With": "XMLHttpRequest",
        }
        details = {"link": question_link, "page": page, "offset": offset}

        try:
            response = self.session.post(
                ANSWER_LIST_URL, data=form, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Answer list request failed: {e}", details) from e

        try:
            result = response.json()
        except ValueError as e:
            raise DecodeError(f"Answer list response is not JSON: {e}", details) from e

        if not isinstance(result, dict):
            raise DecodeError("Answer list response is not a JSON object", details)

        if result.get("r", 0) != 0:
            raise FetchError(f"Answer list returned r={result.get('r')}", details)

        if not isinstance(result.get("msg"), list):
            raise DecodeError("Answer list response has no msg list", details)

        logger.debug(f"Fetched {len(result['msg'])} answers at offset {offset} for {question_link}")
        return [fragment for fragment in result["msg"] if isinstance(fragment, str)]

    def close(self):
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


_default_session: Optional[ZhihuSession] = None


def session_from_env() -> ZhihuSession:
    """Build a session from ZHIHU_COOKIES_FILE and ZHIHU_TIMEOUT."""
    timeout = os.getenv("ZHIHU_TIMEOUT")
    return ZhihuSession(
        cookies_file=os.getenv("ZHIHU_COOKIES_FILE") or None,
        timeout=int(timeout) if timeout else DEFAULT_TIMEOUT,
    )


def get_default_session() -> ZhihuSession:
    """Get or create the shared session configured from the environment."""
    global _default_session
    if _default_session is None:
        _default_session = session_from_env()
    return _default_session


def set_default_session(session: Optional[ZhihuSession]) -> None:
    """Replace the shared session (None resets it)."""
    global _default_session
    _default_session = session
