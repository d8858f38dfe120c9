"""Tests for ZhihuSession."""

import json
import pytest
from unittest.mock import Mock, patch

import requests
from bs4 import BeautifulSoup

from conftest import QUESTION_LINK, make_question_page

COOKIE_FILE = """# Netscape HTTP Cookie File
.zhihu.com\tTRUE\t/\tFALSE\t2147483647\t_xsrf\tcookie-xsrf
.zhihu.com\tTRUE\t/\tTRUE\t2147483647\tz_c0\tsecret-token
"""


def _response(json_data=None, text="", json_error=None):
    response = Mock()
    response.raise_for_status = Mock()
    response.text = text
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


class TestZhihuSessionInit:
    """Tests for session construction."""

    def test_defaults(self):
        """Test the default timeout and user agent."""
        from scrapers.session import ZhihuSession

        session = ZhihuSession()
        assert session.timeout == 30
        assert "Mozilla" in session.session.headers["User-Agent"]

    def test_custom_timeout_and_agent(self):
        """Test that timeout and user agent can be overridden."""
        from scrapers.session import ZhihuSession

        session = ZhihuSession(timeout=5, user_agent="test-agent")
        assert session.timeout == 5
        assert session.session.headers["User-Agent"] == "test-agent"

    def test_load_cookies(self, tmp_path):
        """Test that a Netscape cookie file is loaded into the session."""
        from scrapers.session import ZhihuSession

        cookie_path = tmp_path / "cookies.txt"
        cookie_path.write_text(COOKIE_FILE)

        session = ZhihuSession(cookies_file=str(cookie_path))
        assert session.session.cookies.get("z_c0") == "secret-token"
        assert session.get_xsrf() == "cookie-xsrf"

    def test_load_cookies_bad_file(self, tmp_path):
        """Test that a malformed cookie file raises LoadError."""
        from http.cookiejar import LoadError
        from scrapers.session import ZhihuSession

        cookie_path = tmp_path / "cookies.txt"
        cookie_path.write_text("not a cookie file\n")

        with pytest.raises(LoadError):
            ZhihuSession(cookies_file=str(cookie_path))

    def test_context_manager_closes(self):
        """Test that leaving the context closes the HTTP session."""
        from scrapers.session import ZhihuSession

        with ZhihuSession() as session:
            session.session = Mock()
        session.session.close.assert_called_once()


class TestGetDocument:
    """Tests for get_document()."""

    @patch('scrapers.session.requests.Session')
    def test_returns_parsed_document(self, mock_session_class):
        """Test that a fetched page is parsed with the session timeout."""
        from scrapers.session import ZhihuSession

        mock_http = Mock()
        mock_http.get.return_value = _response(text=make_question_page(answers_num=3))
        mock_session_class.return_value = mock_http

        session = ZhihuSession(timeout=12)
        doc = session.get_document(QUESTION_LINK)

        assert isinstance(doc, BeautifulSoup)
        assert doc.select_one('h3#zh-question-answer-num')['data-num'] == "3"
        mock_http.get.assert_called_once_with(QUESTION_LINK, timeout=12)

    @patch('scrapers.session.requests.Session')
    def test_request_error_raises_fetch_error(self, mock_session_class):
        """Test that connection errors become FetchError."""
        from scrapers.session import ZhihuSession
        from scrapers.exceptions import FetchError

        mock_http = Mock()
        mock_http.get.side_effect = requests.ConnectionError("refused")
        mock_session_class.return_value = mock_http

        session = ZhihuSession()
        with pytest.raises(FetchError) as exc_info:
            session.get_document(QUESTION_LINK)
        assert exc_info.value.details["link"] == QUESTION_LINK

    @patch('scrapers.session.requests.Session')
    def test_http_error_raises_fetch_error(self, mock_session_class):
        """Test that HTTP error statuses become FetchError."""
        from scrapers.session import ZhihuSession
        from scrapers.exceptions import FetchError

        response = _response()
        response.raise_for_status.side_effect = requests.HTTPError("404")
        mock_http = Mock()
        mock_http.get.return_value = response
        mock_session_class.return_value = mock_http

        session = ZhihuSession()
        with pytest.raises(FetchError):
            session.get_document(QUESTION_LINK)


class TestGetXsrf:
    """Tests for get_xsrf()."""

    def test_from_page_form(self):
        """Test that the token is read from the page form."""
        from scrapers.session import ZhihuSession

        doc = BeautifulSoup(make_question_page(), 'html.parser')
        assert ZhihuSession().get_xsrf(doc) == "page-xsrf-token"

    def test_falls_back_to_cookie(self):
        """Test that the _xsrf cookie is used when the page has no token."""
        from scrapers.session import ZhihuSession

        session = ZhihuSession()
        session.session.cookies.set("_xsrf", "from-cookie")
        doc = BeautifulSoup("<html></html>", 'html.parser')
        assert session.get_xsrf(doc) == "from-cookie"

    def test_missing_everywhere(self):
        """Test that a missing token gives an empty string."""
        from scrapers.session import ZhihuSession
        assert ZhihuSession().get_xsrf() == ""


class TestGetAnswerBatch:
    """Tests for get_answer_batch()."""

    @patch('scrapers.session.requests.Session')
    def test_posts_paging_form(self, mock_session_class):
        """Test the form posted for a page of answers."""
        from scrapers.session import ZhihuSession

        mock_http = Mock()
        mock_http.post.return_value = _response({"r": 0, "msg": ["<div>a</div>", "<div>b</div>"]})
        mock_session_class.return_value = mock_http

        session = ZhihuSession(timeout=9)
        fragments = session.get_answer_batch(QUESTION_LINK, 23759686, 2, 20, "tok")

        assert fragments == ["<div>a</div>", "<div>b</div>"]
        args, kwargs = mock_http.post.call_args
        assert args[0] == "http://www.zhihu.com/node/QuestionAnswerListV2"
        assert kwargs["data"]["_xsrf"] == "tok"
        assert kwargs["data"]["method"] == "next"
        assert json.loads(kwargs["data"]["params"]) == {
            "url_token": 23759686, "pagesize": 20, "offset": 40
        }
        assert kwargs["headers"]["Referer"] == QUESTION_LINK
        assert kwargs["headers"]["X-Requested-With"] == "XMLHttpRequest"
        assert kwargs["timeout"] == 9

    @patch('scrapers.session.requests.Session')
    def test_request_error(self, mock_session_class):
        """Test that request errors become a plain FetchError."""
        from scrapers.session import ZhihuSession
        from scrapers.exceptions import FetchError, DecodeError

        mock_http = Mock()
        mock_http.post.side_effect = requests.Timeout("slow")
        mock_session_class.return_value = mock_http

        with pytest.raises(FetchError) as exc_info:
            ZhihuSession().get_answer_batch(QUESTION_LINK, 23759686, 1, 20, "tok")
        assert not isinstance(exc_info.value, DecodeError)
        assert exc_info.value.details["page"] == 1

    @patch('scrapers.session.requests.Session')
    def test_invalid_json(self, mock_session_class):
        """Test that an undecodable body raises DecodeError."""
        from scrapers.session import ZhihuSession
        from scrapers.exceptions import DecodeError

        mock_http = Mock()
        mock_http.post.return_value = _response(json_error=ValueError("Expecting value"))
        mock_session_class.return_value = mock_http

        with pytest.raises(DecodeError):
            ZhihuSession().get_answer_batch(QUESTION_LINK, 23759686, 1, 20, "tok")

    @pytest.mark.parametrize("payload", [[], {"r": 0}, {"r": 0, "msg": "oops"}])
    @patch('scrapers.session.requests.Session')
    def test_unexpected_shape(self, mock_session_class, payload):
        """Test that unexpected payload shapes raise DecodeError."""
        from scrapers.session import ZhihuSession
        from scrapers.exceptions import DecodeError

        mock_http = Mock()
        mock_http.post.return_value = _response(payload)
        mock_session_class.return_value = mock_http

        with pytest.raises(DecodeError):
            ZhihuSession().get_answer_batch(QUESTION_LINK, 23759686, 1, 20, "tok")

    @patch('scrapers.session.requests.Session')
    def test_nonzero_status(self, mock_session_class):
        """Test that a nonzero status raises FetchError."""
        from scrapers.session import ZhihuSession
        from scrapers.exceptions import FetchError, DecodeError

        mock_http = Mock()
        mock_http.post.return_value = _response({"r": 1, "msg": "need login"})
        mock_session_class.return_value = mock_http

        with pytest.raises(FetchError) as exc_info:
            ZhihuSession().get_answer_batch(QUESTION_LINK, 23759686, 1, 20, "tok")
        assert not isinstance(exc_info.value, DecodeError)


class TestDefaultSession:
    """Tests for the shared session."""

    def test_session_from_env(self, tmp_path):
        """Test that timeout and cookies are read from the environment."""
        from scrapers.session import session_from_env

        cookie_path = tmp_path / "cookies.txt"
        cookie_path.write_text(COOKIE_FILE)

        env = {"ZHIHU_COOKIES_FILE": str(cookie_path), "ZHIHU_TIMEOUT": "7"}
        with patch.dict('os.environ', env, clear=True):
            session = session_from_env()

        assert session.timeout == 7
        assert session.session.cookies.get("z_c0") == "secret-token"

    def test_default_session_is_shared(self):
        """Test that the default session is built once."""
        from scrapers import session as session_module

        session_module.set_default_session(None)
        try:
            with patch.dict('os.environ', {}, clear=True):
                first = session_module.get_default_session()
                second = session_module.get_default_session()
            assert first is second
            assert first.timeout == 30
        finally:
            session_module.set_default_session(None)
