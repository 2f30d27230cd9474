"""Event models fed to the capture state machine."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class CaptureEventKind(Enum):
    """Every input the capture state machine reacts to."""
    START = "start"
    STOP = "stop"
    SESSION_STARTED = "session_started"
    SESSION_ENDED = "session_ended"
    RESULT_FINAL = "result_final"
    RESULT_INTERIM = "result_interim"
    ERROR = "error"


@dataclass
class CaptureEvent:
    """A single state machine input with its payload."""
    kind: CaptureEventKind
    text: str = ""                      # RESULT_FINAL / RESULT_INTERIM
    error_code: Optional[str] = None    # ERROR
    error_message: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
