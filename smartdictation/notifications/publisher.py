"""Notification publisher for user-facing dictation messages."""

import logging
from typing import Optional
from pubsub import pub

logger = logging.getLogger(__name__)

CAPTURE_ERROR_TOPIC = "dictation_capture_error"
PARSE_ERROR_TOPIC = "dictation_parse_error"
INFO_TOPIC = "dictation_info"


class DictationNotifier:
    """Publishes toast-style notifications using pubsub.pub.

    Listeners subscribe to the topics with handlers accepting the keyword
    arguments shown in each publish method.
    """

    def __init__(self, prefix: str = ""):
        """Initialize notifier.
        
        Args:
            prefix: Optional topic prefix (e.g. "ward3") to separate notifiers
        """
        self.prefix = f"{prefix}_" if prefix else ""
        logger.info(f"DictationNotifier initialized (prefix='{prefix}')")

    def topic(self, name: str) -> str:
        return f"{self.prefix}{name}"

    def capture_error(self, message: str, code: Optional[str] = None) -> None:
        pub.sendMessage(self.topic(CAPTURE_ERROR_TOPIC), message=message, code=code)
        logger.debug(f"Published capture error notification: {message}")

    def parse_error(self, message: str) -> None:
        pub.sendMessage(self.topic(PARSE_ERROR_TOPIC), message=message)
        logger.debug(f"Published parse error notification: {message}")

    def info(self, message: str) -> None:
        pub.sendMessage(self.topic(INFO_TOPIC), message=message)
