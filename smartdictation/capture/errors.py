"""Capture error taxonomy and the continuous-mode restart policy."""

from enum import Enum
from typing import Optional


class CaptureErrorKind(Enum):
    """Categories of capture failure."""
    UNSUPPORTED = "unsupported"
    PERMISSION_DENIED = "permission_denied"
    NO_AUDIO_DEVICE = "no_audio_device"
    NETWORK = "network"
    UNKNOWN = "unknown"
    BENIGN = "benign"


class ErrorSeverity(Enum):
    """How an error affects the current session."""
    NONE = "none"
    BENIGN = "benign"
    FATAL = "fatal"


BENIGN_CODES = frozenset({"no-speech", "aborted"})

_KIND_BY_CODE = {
    "not-allowed": CaptureErrorKind.PERMISSION_DENIED,
    "service-not-allowed": CaptureErrorKind.PERMISSION_DENIED,
    "audio-capture": CaptureErrorKind.NO_AUDIO_DEVICE,
    "network": CaptureErrorKind.NETWORK,
}

UNSUPPORTED_MESSAGE = "Speech capture is not supported on this platform."

_MESSAGES = {
    CaptureErrorKind.UNSUPPORTED: UNSUPPORTED_MESSAGE,
    CaptureErrorKind.PERMISSION_DENIED: "Microphone access denied. Please allow microphone access.",
    CaptureErrorKind.NO_AUDIO_DEVICE: "No microphone found. Please connect a microphone.",
    CaptureErrorKind.NETWORK: "Network error. Please check your connection.",
}


def classify_error(code: str) -> CaptureErrorKind:
    """Map a provider error code to its category."""
    if code in BENIGN_CODES:
        return CaptureErrorKind.BENIGN
    return _KIND_BY_CODE.get(code, CaptureErrorKind.UNKNOWN)


def severity_of(kind: CaptureErrorKind) -> ErrorSeverity:
    if kind is CaptureErrorKind.BENIGN:
        return ErrorSeverity.BENIGN
    return ErrorSeverity.FATAL


def error_message(kind: CaptureErrorKind, code: Optional[str] = None) -> Optional[str]:
    """Human-readable message for a category, None for benign errors."""
    if kind is CaptureErrorKind.BENIGN:
        return None
    if kind is CaptureErrorKind.UNKNOWN:
        return f"Speech recognition error: {code}"
    return _MESSAGES[kind]


def should_restart(continuous: bool, manual_stop_requested: bool, severity: ErrorSeverity) -> bool:
    """Decide whether an ended session is reopened automatically.
    
    Args:
        continuous: Engine runs in continuous mode
        manual_stop_requested: The user asked to stop since the last start()
        severity: Worst error severity seen in the session that just ended
        
    Returns:
        True if the engine should immediately start a new session
    """
    return continuous and not manual_stop_requested and severity is not ErrorSeverity.FATAL
