"""Canonical constants for zhihu-answers."""

ZHIHU_URL = "https://www.zhihu.com"

# Answers embedded per question page and returned per "load more" batch
PAGE_SIZE = 20

ANSWER_LIST_URL = "http://www.zhihu.com/node/QuestionAnswerListV2"

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)

DEFAULT_TIMEOUT = 30
DEFAULT_MAX_WORKERS = 4

# data-isowner value marking an answer rendered for its own author
SELF_VIEW_MARKER = "1"

SELECTORS = {
    'title': 'h2.zm-item-title',
    'detail': 'div#zh-question-detail',
    'answers_num': 'h3#zh-question-answer-num',
    'followers_num': 'div.zg-gray-normal > a > strong',
    'topics': 'a.zm-item-tag',
    'visit_times': 'meta[itemprop="visitsCount"]',
    'xsrf': 'input[name="_xsrf"]',
    'answer': 'div.zm-item-answer',
    'answer_link': 'a.answer-date-link',
    'author_info': 'div.zm-item-answer-author-info',
    'author_link': 'a.author-link',
    'self_vote': 'a.zm-item-vote-count',
    'vote_bar': 'div.zm-votebar',
    'vote_count': 'span.count',
    'content': 'div.zm-editable-content',
}

# Upvote display suffixes and their multipliers
UPVOTE_SUFFIXES = {
    'k': 1000,
    'w': 10000,
    '万': 10000,
}
