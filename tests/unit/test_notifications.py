"""Unit tests for DictationNotifier."""

import uuid

import pytest
from pubsub import pub

from smartdictation.notifications.publisher import (
    CAPTURE_ERROR_TOPIC,
    INFO_TOPIC,
    PARSE_ERROR_TOPIC,
    DictationNotifier,
)


@pytest.fixture
def notifier():
    # Unique prefix per test keeps topic definitions independent
    return DictationNotifier(prefix=f"t{uuid.uuid4().hex}")


@pytest.mark.unit
class TestDictationNotifier:
    """Test cases for pubsub notifications."""

    def test_topic_prefix(self):
        assert DictationNotifier().topic(PARSE_ERROR_TOPIC) == "dictation_parse_error"
        assert DictationNotifier(prefix="ward3").topic(INFO_TOPIC) == "ward3_dictation_info"

    def test_capture_error(self, notifier):
        received = []

        def listener(message, code=None):
            received.append((message, code))

        pub.subscribe(listener, notifier.topic(CAPTURE_ERROR_TOPIC))

        notifier.capture_error("Network error. Please check your connection.", "network")

        assert received == [("Network error. Please check your connection.", "network")]

    def test_parse_error(self, notifier):
        received = []

        def listener(message):
            received.append(message)

        pub.subscribe(listener, notifier.topic(PARSE_ERROR_TOPIC))

        notifier.parse_error("Failed to parse dictation. Please try again.")

        assert received == ["Failed to parse dictation. Please try again."]

    def test_info(self, notifier):
        received = []

        def listener(message):
            received.append(message)

        pub.subscribe(listener, notifier.topic(INFO_TOPIC))

        notifier.info("3 sections applied")

        assert received == ["3 sections applied"]

    def test_publish_without_listeners(self, notifier):
        notifier.capture_error("No microphone found. Please connect a microphone.", "audio-capture")
        notifier.parse_error("Failed to parse dictation. Please try again.")
