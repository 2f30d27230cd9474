"""Speech capture: provider interface, error policy and the capture state machine."""

from .base import AbstractCaptureProvider, CaptureProviderError, CaptureAlreadyStartedError
from .commands import process_voice_commands, CommandResult
from .engine import SpeechCaptureEngine, append_segment
from .errors import CaptureErrorKind, ErrorSeverity, classify_error, error_message, should_restart

__all__ = [
    "AbstractCaptureProvider",
    "CaptureProviderError",
    "CaptureAlreadyStartedError",
    "SpeechCaptureEngine",
    "append_segment",
    "process_voice_commands",
    "CommandResult",
    "CaptureErrorKind",
    "ErrorSeverity",
    "classify_error",
    "error_message",
    "should_restart",
]
