"""Data models for the SmartDictation package."""

from .capture import CaptureStatus, CaptureSession, TranscriptState, RecognitionSegment
from .events import CaptureEvent, CaptureEventKind
from .sections import MergeMode, ParsedSection, ExistingSection, SectionUpdate

__all__ = [
    "CaptureStatus",
    "CaptureSession",
    "TranscriptState",
    "RecognitionSegment",
    "CaptureEvent",
    "CaptureEventKind",
    # Section reconciliation models
    "MergeMode",
    "ParsedSection",
    "ExistingSection",
    "SectionUpdate",
]
