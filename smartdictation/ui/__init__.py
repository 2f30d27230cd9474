"""Terminal user interface for dictation review."""

from .review_screen import DictationReviewScreen

__all__ = ["DictationReviewScreen"]
