"""Feed generation for question answers."""

from .feed_builder import AnswerFeedBuilder

__all__ = ["AnswerFeedBuilder"]
