"""Abstract base class for speech capture providers."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional
import logging

from ..models.capture import RecognitionSegment

logger = logging.getLogger(__name__)

StartCallback = Callable[[], None]
EndCallback = Callable[[], None]
ResultCallback = Callable[[List[RecognitionSegment], int], None]
ErrorCallback = Callable[[str, Optional[str]], None]


class CaptureProviderError(RuntimeError):
    """Failure reported synchronously by a capture provider."""

    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(message or code)
        self.code = code
        self.message = message


class CaptureAlreadyStartedError(CaptureProviderError):
    """Raised by start() when a session is already open."""

    def __init__(self, message: str = "Capture session already started"):
        super().__init__("already-started", message)


class AbstractCaptureProvider(ABC):
    """Platform speech capture capability.

    Providers open one listening session at a time and report what happens to
    it through the callbacks registered with bind(). Session acquisition and
    teardown complete asynchronously: callers must not assume the session is
    open right after start() or closed right after stop().
    """

    def __init__(self, language: str = "en-US", continuous: bool = True):
        """Initialize provider with language and session mode.
        
        Args:
            language: BCP-47 language tag
            continuous: Keep listening across pauses instead of ending after one utterance
        """
        self.language = language
        self.continuous = continuous
        self.interim_results = True  # Always requested

        self.on_start: Optional[StartCallback] = None
        self.on_end: Optional[EndCallback] = None
        self.on_result: Optional[ResultCallback] = None
        self.on_error: Optional[ErrorCallback] = None

    def bind(self,
             on_start: Optional[StartCallback] = None,
             on_end: Optional[EndCallback] = None,
             on_result: Optional[ResultCallback] = None,
             on_error: Optional[ErrorCallback] = None) -> None:
        """Register session callbacks (None detaches)."""
        self.on_start = on_start
        self.on_end = on_end
        self.on_result = on_result
        self.on_error = on_error
        logger.debug(f"Callbacks bound to {self.__class__.__name__}")

    @abstractmethod
    def start(self) -> None:
        """Request a new capture session.
        
        Raises:
            CaptureAlreadyStartedError: If a session is already open
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop listening; results already captured are still delivered."""
        pass

    @abstractmethod
    def abort(self) -> None:
        """Tear the session down immediately, discarding pending results."""
        pass
