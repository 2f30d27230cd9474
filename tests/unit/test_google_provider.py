"""Unit tests for GoogleStreamingCaptureProvider with the Speech client and microphone mocked."""

import threading
from types import SimpleNamespace

import pytest
from unittest.mock import Mock
from google.api_core import exceptions as gax_exceptions

from smartdictation.capture.base import CaptureAlreadyStartedError, CaptureProviderError
from smartdictation.capture.engine import SpeechCaptureEngine
from smartdictation.capture.google_provider import GoogleStreamingCaptureProvider
from smartdictation.models.capture import CaptureStatus


def make_response(*results):
    """Build a streaming response from (transcript, is_final) pairs."""
    return SimpleNamespace(results=[
        SimpleNamespace(alternatives=[SimpleNamespace(transcript=text, confidence=0.9 if final else 0.0)],
                        is_final=final)
        for text, final in results
    ])


class EventRecorder:
    """Collects provider callbacks in order."""

    def __init__(self, provider):
        self.events = []
        provider.bind(
            on_start=lambda: self.events.append(("start",)),
            on_end=lambda: self.events.append(("end",)),
            on_result=lambda segments, index: self.events.append(("result", segments, index)),
            on_error=lambda code, message: self.events.append(("error", code)),
        )

    @property
    def kinds(self):
        return [e[0] for e in self.events]


@pytest.fixture
def audio_interface():
    interface = Mock()
    interface.open.return_value = Mock()
    return interface


@pytest.fixture
def speech_client():
    return Mock()


@pytest.fixture
def google_provider(speech_client, audio_interface):
    return GoogleStreamingCaptureProvider(
        client=speech_client,
        audio_interface_factory=lambda: audio_interface,
    )


def run_session(provider):
    provider.start()
    provider.join(timeout=5.0)
    return provider.process_events()


@pytest.mark.unit
class TestGoogleStreamingCaptureProvider:
    """Test cases for the Google streaming provider."""

    def test_streaming_config(self):
        provider = GoogleStreamingCaptureProvider(client=Mock(), language="en-GB", continuous=False)

        config = provider.build_streaming_config()

        assert config.interim_results is True
        assert config.single_utterance is True
        assert config.config.language_code == "en-GB"
        assert config.config.sample_rate_hertz == 16000

    def test_results_delivered_on_caller_thread(self, google_provider, speech_client, audio_interface):
        speech_client.streaming_recognize.return_value = [
            make_response(("chest", False)),
            make_response(("Chest pain.", True)),
        ]
        recorder = EventRecorder(google_provider)

        delivered = run_session(google_provider)

        assert delivered == 4
        assert recorder.kinds == ["start", "result", "result", "end"]
        final_segment = recorder.events[2][1][0]
        assert final_segment.text == "Chest pain."
        assert final_segment.is_final is True
        assert final_segment.confidence == 0.9
        assert recorder.events[1][1][0].confidence is None
        assert google_provider.is_active is False
        audio_interface.terminate.assert_called_once()
        audio_interface.open.return_value.close.assert_called_once()

    def test_nothing_delivered_without_process_events(self, google_provider, speech_client):
        speech_client.streaming_recognize.return_value = [make_response(("hello", True))]
        recorder = EventRecorder(google_provider)

        google_provider.start()
        google_provider.join(timeout=5.0)

        assert recorder.events == []

    def test_stream_limit_is_plain_end(self, google_provider, speech_client):
        speech_client.streaming_recognize.side_effect = gax_exceptions.OutOfRange("stream too long")
        recorder = EventRecorder(google_provider)

        run_session(google_provider)

        assert recorder.kinds == ["start", "end"]

    @pytest.mark.parametrize("exc,code", [
        (gax_exceptions.PermissionDenied("denied"), "not-allowed"),
        (gax_exceptions.Unauthenticated("bad key"), "not-allowed"),
        (gax_exceptions.ServiceUnavailable("down"), "network"),
        (gax_exceptions.InternalServerError("oops"), "network"),
    ])
    def test_api_errors(self, google_provider, speech_client, exc, code):
        speech_client.streaming_recognize.side_effect = exc
        recorder = EventRecorder(google_provider)

        run_session(google_provider)

        assert recorder.events == [("start",), ("error", code), ("end",)]

    def test_microphone_unavailable(self, google_provider, audio_interface):
        audio_interface.open.side_effect = OSError("No Default Input Device Available")
        recorder = EventRecorder(google_provider)

        run_session(google_provider)

        assert recorder.events == [("error", "audio-capture"), ("end",)]
        audio_interface.terminate.assert_called_once()

    def test_start_while_active(self, google_provider, speech_client):
        release = threading.Event()

        def blocking_recognize(**kwargs):
            release.wait(5.0)
            return []

        speech_client.streaming_recognize.side_effect = blocking_recognize

        google_provider.start()
        try:
            with pytest.raises(CaptureAlreadyStartedError):
                google_provider.start()
        finally:
            release.set()
            google_provider.join(timeout=5.0)

    def test_abort_drops_pending_events(self, google_provider, speech_client):
        speech_client.streaming_recognize.return_value = [make_response(("hello", True))]
        recorder = EventRecorder(google_provider)

        google_provider.start()
        google_provider.join(timeout=5.0)
        google_provider.abort()

        assert google_provider.process_events() == 0
        assert recorder.events == []

    def test_client_creation_failure(self, tmp_path):
        provider = GoogleStreamingCaptureProvider(credentials_path=str(tmp_path / "missing.json"))

        with pytest.raises(CaptureProviderError) as exc_info:
            provider.start()

        assert exc_info.value.code == "network"
        assert provider.is_active is False

    def test_drives_capture_engine(self, google_provider, speech_client):
        speech_client.streaming_recognize.return_value = [
            make_response(("Patient reports headache", True)),
            make_response((" and nausea", True)),
        ]
        engine = SpeechCaptureEngine(google_provider, continuous=False, process_commands=False)

        engine.start()
        google_provider.join(timeout=5.0)
        google_provider.process_events()

        assert engine.final_text == "Patient reports headache and nausea"
        assert engine.status is CaptureStatus.IDLE
