"""Pytest configuration and fixtures for SmartDictation tests."""

import asyncio
import logging
from typing import List, Optional

import pytest

from smartdictation.capture.base import (
    AbstractCaptureProvider,
    CaptureAlreadyStartedError,
    CaptureProviderError,
)
from smartdictation.capture.engine import SpeechCaptureEngine
from smartdictation.models.capture import RecognitionSegment
from smartdictation.parsing.client import TranscriptParseError
from smartdictation.parsing.schema import ParseDictationResponse
from smartdictation.services.session_controller import DictationSessionController


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without external services")
    config.addinivalue_line("markers", "integration: tests that exercise several components together")


class FakeCaptureProvider(AbstractCaptureProvider):
    """Capture provider driven by the test: nothing happens until a helper is called."""

    def __init__(self, language: str = "en-US", continuous: bool = True):
        super().__init__(language=language, continuous=continuous)
        self.active = False
        self.start_calls = 0
        self.stop_calls = 0
        self.abort_calls = 0
        self.start_error: Optional[CaptureProviderError] = None

    def start(self) -> None:
        if self.active:
            raise CaptureAlreadyStartedError()
        if self.start_error is not None:
            raise self.start_error
        self.start_calls += 1
        self.active = True

    def stop(self) -> None:
        self.stop_calls += 1

    def abort(self) -> None:
        self.abort_calls += 1

    # Simulated provider callbacks

    def open(self) -> None:
        self.on_start()

    def end(self) -> None:
        self.active = False
        self.on_end()

    def final(self, *texts: str) -> None:
        self.on_result([RecognitionSegment(text=t, is_final=True) for t in texts], 0)

    def interim(self, *texts: str) -> None:
        self.on_result([RecognitionSegment(text=t, is_final=False) for t in texts], 0)

    def results(self, segments: List[RecognitionSegment], resume_index: int = 0) -> None:
        self.on_result(segments, resume_index)

    def error(self, code: str, message: Optional[str] = None) -> None:
        self.on_error(code, message)


class FakeParserClient:
    """Parser client returning canned responses, optionally held until released."""

    def __init__(self, response: Optional[dict] = None, error: Optional[TranscriptParseError] = None):
        self.response = response
        self.error = error
        self.calls: List[str] = []
        self.gate: Optional[asyncio.Event] = None

    async def parse(self, transcript: str) -> ParseDictationResponse:
        self.calls.append(transcript)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return ParseDictationResponse.model_validate(self.response or {})


CHEST_PAIN_TRANSCRIPT = "Chief complaint is chest pain. Physical exam shows normal heart sounds."

CHEST_PAIN_RESPONSE = {
    "success": True,
    "sections": {
        "chief_complaint": "Chief complaint is chest pain.",
        "physical_exam": "Physical exam shows normal heart sounds.",
    },
    "sectionMeta": [
        {"id": "chief_complaint", "title": "Chief Complaint"},
        {"id": "physical_exam", "title": "Physical Exam"},
    ],
    "sectionCount": 2,
}


@pytest.fixture
def provider():
    """Provides a fake capture provider."""
    return FakeCaptureProvider()


@pytest.fixture
def engine(provider):
    """Provides a continuous capture engine bound to the fake provider."""
    return SpeechCaptureEngine(provider, continuous=True, process_commands=False)


@pytest.fixture
def listening_engine(engine, provider):
    """Engine with an open capture session."""
    engine.start()
    provider.open()
    return engine


@pytest.fixture
def parser_client():
    return FakeParserClient(response=CHEST_PAIN_RESPONSE)


@pytest.fixture
def controller(engine, parser_client):
    return DictationSessionController(engine=engine, parser_client=parser_client)


@pytest.fixture
def chest_pain_transcript():
    return CHEST_PAIN_TRANSCRIPT


@pytest.fixture
def chest_pain_response():
    return CHEST_PAIN_RESPONSE
