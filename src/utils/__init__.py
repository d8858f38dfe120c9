"""Utility modules for logging."""

from .logger import resolve_level, setup_logger

__all__ = ["resolve_level", "setup_logger"]
