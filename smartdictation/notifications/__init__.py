"""User-facing notifications published over pub/sub."""

from .publisher import DictationNotifier, CAPTURE_ERROR_TOPIC, PARSE_ERROR_TOPIC, INFO_TOPIC

__all__ = [
    "DictationNotifier",
    "CAPTURE_ERROR_TOPIC",
    "PARSE_ERROR_TOPIC",
    "INFO_TOPIC",
]
