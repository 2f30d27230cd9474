"""Capture-related data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CaptureStatus(Enum):
    """Lifecycle state of the capture session."""
    IDLE = "idle"
    LISTENING = "listening"
    RESTARTING = "restarting"  # Session ended unexpectedly, waiting for the provider to reopen
    ERROR = "error"


@dataclass
class RecognitionSegment:
    """One recognized chunk of speech in a provider result batch."""
    text: str
    is_final: bool = False
    confidence: Optional[float] = None


@dataclass
class CaptureSession:
    """State of the (single) capture session owned by a SpeechCaptureEngine."""
    status: CaptureStatus = CaptureStatus.IDLE
    manual_stop_requested: bool = False
    continuous: bool = True
    language: str = "en-US"


@dataclass
class TranscriptState:
    """Accumulated transcript text."""
    final_text: str = ""    # Only ever appended to
    interim_text: str = ""  # Replaced on every result batch
