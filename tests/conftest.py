"""Pytest configuration and shared fixtures."""

import pytest
from pathlib import Path
from unittest.mock import Mock

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

QUESTION_LINK = "https://www.zhihu.com/question/23759686"


def make_answer_html(
    number: int,
    author: tuple = ("作者", "/people/author"),
    upvote: str = "10",
    self_upvote: str = "999",
    is_owner: bool = False,
    with_link: bool = True,
    content: str = None,
) -> str:
    """Build the markup of one answer the way question pages render it.

    Pass author=None for an anonymous answer.
    """
    if author is None:
        author_html = '<span class="name">匿名用户</span>'
    else:
        author_html = f'<a class="author-link" href="{author[1]}">  {author[0]}  </a>'

    link_html = ""
    if with_link:
        link_html = f'<a class="answer-date-link" href="/question/23759686/answer/{number}">编辑于 2016-01-01</a>'

    if content is None:
        content = f"<p>Answer body {number}</p>"

    return f"""
<div class="zm-item-answer" data-aid="{number}" data-isowner="{'1' if is_owner else '0'}">
  <div class="zm-votebar"><button class="up"><span class="count">{upvote}</span></button></div>
  <a class="zm-item-vote-count" href="javascript:;">{self_upvote}</a>
  <div class="answer-head">
    <div class="zm-item-answer-author-info">{author_html}</div>
  </div>
  <div class="zm-editable-content clearfix">{content}</div>
  {link_html}
</div>
"""


def make_question_page(
    answers_html: str = "",
    answers_num: int = 0,
    title: str = "如何学习 Python？",
    head_extra: str = "",
) -> str:
    """Build a question page around the given answer markup."""
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8"/>
  <title>{title}</title>
  <link rel="stylesheet" href="/static/main.css"/>
  {head_extra}
</head>
<body>
  <input type="hidden" name="_xsrf" value="page-xsrf-token"/>
  <div id="zh-question-title"><h2 class="zm-item-title">  {title}  </h2></div>
  <div id="zh-question-detail">  想系统地学习 Python。  </div>
  <div class="zm-tag-editor">
    <a class="zm-item-tag" href="/topic/1"> Python </a>
    <a class="zm-item-tag" href="/topic/2">编程</a>
  </div>
  <h3 id="zh-question-answer-num" data-num="{answers_num}">{answers_num} 个回答</h3>
  <div class="zg-gray-normal"><a href="/question/23759686/followers"><strong>1234</strong></a>人关注该问题</div>
  <meta itemprop="visitsCount" content="56789"/>
  <div id="zh-question-answer-wrap">{answers_html}</div>
</body>
</html>
"""


def answers_range(start: int, stop: int, **kwargs) -> list:
    """Answer markups numbered start..stop-1."""
    return [make_answer_html(n, author=(f"user{n}", f"/people/user{n}"), **kwargs) for n in range(start, stop)]


@pytest.fixture
def question_link():
    return QUESTION_LINK


@pytest.fixture
def mock_session():
    """Session double serving a question page with 20 of 70 answers embedded.

    Remote pages 1..3 hold answers 20..39, 40..59 and 60..69.
    """
    from bs4 import BeautifulSoup
    from scrapers.session import ZhihuSession

    page = make_question_page("".join(answers_range(0, 20)), answers_num=70)
    batches = {
        1: answers_range(20, 40),
        2: answers_range(40, 60),
        3: answers_range(60, 70),
    }

    session = Mock(spec=ZhihuSession)
    session.get_document.side_effect = lambda link: BeautifulSoup(page, 'html.parser')
    session.get_xsrf.return_value = "page-xsrf-token"
    session.get_answer_batch.side_effect = lambda link, token, page_no, size, xsrf: batches[page_no]
    return session
