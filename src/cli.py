"""Command-line interface for reading zhihu questions and answers."""

import argparse
import json
import logging
import sys
from http.cookiejar import LoadError
from typing import List, Optional

from generator.feed_builder import AnswerFeedBuilder
from scrapers.answer import Answer
from scrapers.exceptions import FetchError, InvalidQuestionLinkError
from scrapers.question import Question
from scrapers.session import ZhihuSession, session_from_env
from constants import DEFAULT_MAX_WORKERS

logger = logging.getLogger("zhihu_answers")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog='zhihu-answers',
        description='Read zhihu questions and their answers'
    )
    parser.add_argument('--workers', type=int, default=DEFAULT_MAX_WORKERS,
                        help='Concurrent "load more" requests')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # info <link>
    info_parser = subparsers.add_parser('info', help='Show question details')
    info_parser.add_argument('link', help='Question link')

    # answers <link> [--top N | --all] [--json]
    answers_parser = subparsers.add_parser('answers', help='List top answers')
    answers_parser.add_argument('link', help='Question link')
    answers_parser.add_argument('--top', type=int, default=1, help='Number of answers (default: 1)')
    answers_parser.add_argument('--all', action='store_true', help='All answers')
    answers_parser.add_argument('--json', action='store_true', help='Print JSON')

    # feed <link> --output PATH [--top N]
    feed_parser = subparsers.add_parser('feed', help='Write answers as an RSS feed')
    feed_parser.add_argument('link', help='Question link')
    feed_parser.add_argument('--output', required=True, help='Output file path')
    feed_parser.add_argument('--top', type=int, default=10, help='Number of answers (default: 10)')

    return parser


def answer_to_dict(answer: Answer) -> dict:
    """Convert an answer to a JSON-serializable dict."""
    return {
        'link': answer.link,
        'author': answer.author.id,
        'author_link': answer.author.link,
        'anonymous': answer.author.is_anonymous,
        'upvote': answer.upvote,
        'content': answer.content,
    }


def handle_info(question: Question) -> int:
    """Print the question's scalar fields."""
    print(f"Title:     {question.title}")
    print(f"Link:      {question.link}")
    print(f"Answers:   {question.answers_num}")
    print(f"Followers: {question.followers_num}")
    print(f"Visits:    {question.visit_times}")
    print(f"Topics:    {', '.join(question.topics) or '-'}")
    if question.detail:
        print()
        print(question.detail)
    return 0


def handle_answers(question: Question, top: int, all_answers: bool = False, as_json: bool = False) -> int:
    """Print the question's top answers."""
    if all_answers:
        answers = question.get_all_answers()
    else:
        answers = question.get_top_x_answers(top)

    if as_json:
        print(json.dumps([answer_to_dict(a) for a in answers], ensure_ascii=False, indent=2))
        return 0

    print(f"{question.title} ({len(answers)} of {question.answers_num} answers)")
    for rank, answer in enumerate(answers, start=1):
        print(f"{rank:>3}. [{answer.upvote}] {answer.author.id} {answer.link}")
    return 0


def handle_feed(question: Question, output: str, top: int) -> int:
    """Write the question's top answers to an RSS file."""
    answers = question.get_top_x_answers(top)

    builder = AnswerFeedBuilder(question)
    builder.create_feed(answers)
    builder.save_feed(output)

    print(f"Wrote {len(answers)} answers to {output}")
    return 0


def main(args: Optional[List[str]] = None, session: Optional[ZhihuSession] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command line arguments (defaults to sys.argv).
        session: Session to use; built from the environment when omitted.

    Returns:
        Exit code (0 for success).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 1

    if session is None:
        try:
            session = session_from_env()
        except (ValueError, LoadError, OSError) as e:
            logger.error(f"Invalid session configuration: {e}")
            print(f"Error: invalid session configuration: {e}")
            return 1

    try:
        question = Question(parsed.link, session=session, max_workers=parsed.workers)
    except InvalidQuestionLinkError as e:
        print(f"Error: {e.message}")
        return 1

    try:
        if parsed.command == 'info':
            return handle_info(question)
        if parsed.command == 'answers':
            return handle_answers(question, parsed.top, parsed.all, parsed.json)
        if parsed.command == 'feed':
            return handle_feed(question, parsed.output, parsed.top)
    except FetchError as e:
        logger.error(f"Failed to read {question.link}: {e}")
        print(f"Error: {e.message}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
