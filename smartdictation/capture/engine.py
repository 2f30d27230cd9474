"""Speech capture engine: a state machine over capture provider events."""

import logging
from typing import Callable, Dict, List, Optional

from .base import AbstractCaptureProvider, CaptureAlreadyStartedError, CaptureProviderError
from .commands import process_voice_commands
from .errors import (
    UNSUPPORTED_MESSAGE,
    CaptureErrorKind,
    ErrorSeverity,
    classify_error,
    error_message,
    severity_of,
    should_restart,
)
from ..models.capture import CaptureSession, CaptureStatus, RecognitionSegment, TranscriptState
from ..models.events import CaptureEvent, CaptureEventKind

logger = logging.getLogger(__name__)


def append_segment(existing: str, segment: str) -> str:
    """Append a final segment, separating it from existing text by one space.

    No separator is inserted when either side of the boundary is already
    whitespace, so provider segments that carry a leading space do not end up
    double-spaced. Text following a line break starts flush at the margin.
    """
    if not existing:
        return segment.lstrip()
    if existing.endswith("\n"):
        return existing + segment.lstrip(" \t")
    if existing[-1].isspace() or segment[:1].isspace():
        return existing + segment
    return f"{existing} {segment}"


class SpeechCaptureEngine:
    """Owns one capture session and accumulates its transcript.

    All provider callbacks are turned into CaptureEvents and routed through
    dispatch(), the only place where state changes. Failures are exposed as
    state (status/error), never raised to the caller.
    """

    def __init__(self,
                 provider: Optional[AbstractCaptureProvider],
                 continuous: bool = True,
                 language: str = "en-US",
                 process_commands: bool = True,
                 on_transcript: Optional[Callable[[str], None]] = None,
                 on_interim: Optional[Callable[[str], None]] = None,
                 on_error: Optional[Callable[[str, Optional[str]], None]] = None):
        """Initialize the engine.

        Args:
            provider: Capture capability, or None when the platform has none
            continuous: Reopen the session automatically when it ends on its own
            language: Language tag passed to the provider
            process_commands: Apply spoken command substitution to final segments
            on_transcript: Called with the full final text whenever it grows
            on_interim: Called with the live interim text when it is non-empty
            on_error: Called with (message, code) on fatal capture errors
        """
        self.provider = provider
        self.session = CaptureSession(continuous=continuous, language=language)
        self.transcript = TranscriptState()
        self.process_commands = process_commands

        self.on_transcript = on_transcript
        self.on_interim = on_interim
        self.on_error = on_error

        self.error: Optional[str] = None
        self.error_kind: Optional[CaptureErrorKind] = None
        self.restart_count = 0

        self._session_severity = ErrorSeverity.NONE
        self._disposed = False
        # start() arrived while a stopped session was still winding down
        self._start_pending = False

        self._handlers: Dict[CaptureEventKind, Callable[[CaptureEvent], None]] = {
            CaptureEventKind.START: self._handle_start,
            CaptureEventKind.STOP: self._handle_stop,
            CaptureEventKind.SESSION_STARTED: self._handle_session_started,
            CaptureEventKind.SESSION_ENDED: self._handle_session_ended,
            CaptureEventKind.RESULT_FINAL: self._handle_result_final,
            CaptureEventKind.RESULT_INTERIM: self._handle_result_interim,
            CaptureEventKind.ERROR: self._handle_error,
        }

        if provider is not None:
            provider.continuous = continuous
            provider.language = language
            provider.interim_results = True
            provider.bind(
                on_start=self._on_provider_start,
                on_end=self._on_provider_end,
                on_result=self._on_provider_result,
                on_error=self._on_provider_error,
            )
            logger.info(f"SpeechCaptureEngine ready: provider={provider.__class__.__name__}, "
                        f"continuous={continuous}, language={language}")
        else:
            logger.warning("SpeechCaptureEngine created without a capture provider; capture is unsupported")

    # ------------------------------------------------------------------
    # Public state

    @property
    def is_supported(self) -> bool:
        return self.provider is not None

    @property
    def status(self) -> CaptureStatus:
        return self.session.status

    @property
    def is_listening(self) -> bool:
        return self.session.status is CaptureStatus.LISTENING

    @property
    def is_active(self) -> bool:
        """True while listening or between an unexpected end and the restart."""
        return self.session.status in (CaptureStatus.LISTENING, CaptureStatus.RESTARTING)

    @property
    def final_text(self) -> str:
        return self.transcript.final_text

    @property
    def interim_text(self) -> str:
        return self.transcript.interim_text

    # ------------------------------------------------------------------
    # Commands

    def start(self) -> None:
        """Open a capture session (no-op if one is already open)."""
        self._check_not_disposed()
        self.dispatch(CaptureEvent(CaptureEventKind.START))

    def stop(self) -> None:
        """Stop capturing and suppress automatic restarts until the next start()."""
        self.dispatch(CaptureEvent(CaptureEventKind.STOP))

    def toggle(self) -> None:
        if self.is_active:
            self.stop()
        else:
            self.start()

    def reset(self) -> None:
        """Clear the accumulated transcript without touching the session."""
        self.transcript = TranscriptState()
        logger.debug("Transcript reset")

    def dispose(self) -> None:
        """Abort any open session and detach from the provider."""
        if self._disposed:
            return
        self.session.manual_stop_requested = True
        self._start_pending = False
        if self.provider is not None:
            try:
                self.provider.abort()
            except CaptureProviderError as e:
                logger.debug(f"Provider abort during dispose failed: {e}")
            self.provider.bind()
        self.session.status = CaptureStatus.IDLE
        self._disposed = True
        logger.info("SpeechCaptureEngine disposed")

    def dispatch(self, event: CaptureEvent) -> None:
        """Apply a single event to the state machine."""
        logger.debug(f"Event {event.kind.value} in state {self.session.status.value}")
        self._handlers[event.kind](event)

    # ------------------------------------------------------------------
    # Provider callbacks

    def _on_provider_start(self) -> None:
        self.dispatch(CaptureEvent(CaptureEventKind.SESSION_STARTED))

    def _on_provider_end(self) -> None:
        self.dispatch(CaptureEvent(CaptureEventKind.SESSION_ENDED))

    def _on_provider_error(self, code: str, message: Optional[str] = None) -> None:
        self.dispatch(CaptureEvent(CaptureEventKind.ERROR, error_code=code, error_message=message))

    def _on_provider_result(self, segments: List[RecognitionSegment], resume_index: int = 0) -> None:
        final_chunk = ""
        interim_chunk = ""
        has_final = False
        for segment in segments[resume_index:]:
            if segment.is_final:
                final_chunk = append_segment(final_chunk, segment.text) if has_final else segment.text
                has_final = True
            else:
                interim_chunk += segment.text

        if has_final:
            self.dispatch(CaptureEvent(CaptureEventKind.RESULT_FINAL, text=final_chunk))
        self.dispatch(CaptureEvent(CaptureEventKind.RESULT_INTERIM, text=interim_chunk))

    # ------------------------------------------------------------------
    # Transitions

    def _handle_start(self, _event: CaptureEvent) -> None:
        if self.provider is None:
            self.error = UNSUPPORTED_MESSAGE
            self.error_kind = CaptureErrorKind.UNSUPPORTED
            logger.warning("Capture start requested but no provider is available")
            return

        was_stopped = self.session.manual_stop_requested
        self.error = None
        self.error_kind = None
        self.session.manual_stop_requested = False
        self._session_severity = ErrorSeverity.NONE
        if self.session.status is CaptureStatus.ERROR:
            self.session.status = CaptureStatus.IDLE

        logger.info("Starting capture session")
        if not self._request_provider_start() and was_stopped:
            self._start_pending = True
            logger.info("Previous session still closing; start deferred until it ends")

    def _handle_stop(self, _event: CaptureEvent) -> None:
        if self.provider is None:
            return

        self.session.manual_stop_requested = True
        self._start_pending = False
        self.transcript.interim_text = ""
        if self.session.status is not CaptureStatus.ERROR:
            self.session.status = CaptureStatus.IDLE

        logger.info("Stopping capture session (manual)")
        try:
            self.provider.stop()
        except CaptureProviderError as e:
            logger.debug(f"Provider stop failed: {e}")

    def _handle_session_started(self, _event: CaptureEvent) -> None:
        if self.session.manual_stop_requested or self._session_severity is ErrorSeverity.FATAL:
            logger.debug("Session opened after stop/fatal error; state unchanged")
            return
        self.session.status = CaptureStatus.LISTENING
        logger.info("Capture session listening")

    def _handle_session_ended(self, _event: CaptureEvent) -> None:
        self.transcript.interim_text = ""

        if self._start_pending:
            self._start_pending = False
            logger.info("Previous session closed; issuing deferred start")
            self._request_provider_start()
            return

        if should_restart(self.session.continuous,
                          self.session.manual_stop_requested,
                          self._session_severity):
            self.restart_count += 1
            self.session.status = CaptureStatus.RESTARTING
            self._session_severity = ErrorSeverity.NONE
            logger.info(f"Capture session ended unexpectedly; restarting (restart #{self.restart_count})")
            self._request_provider_start()
            return

        if self.session.status is not CaptureStatus.ERROR:
            self.session.status = CaptureStatus.IDLE
        logger.info(f"Capture session ended (state: {self.session.status.value})")

    def _handle_result_final(self, event: CaptureEvent) -> None:
        text = event.text
        stop_requested = False
        if self.process_commands:
            result = process_voice_commands(text)
            text = result.text
            stop_requested = result.stop_requested

        # A spoken "new line" arrives as a bare line break and must be kept
        if text.strip() or "\n" in text:
            updated = append_segment(self.transcript.final_text, text)
            if updated != self.transcript.final_text:
                self.transcript.final_text = updated
                logger.debug(f"Final segment committed: {text[:50]!r}")
                self._notify(self.on_transcript, self.transcript.final_text)

        if stop_requested:
            logger.info("Stop command spoken; stopping capture")
            self.stop()

    def _handle_result_interim(self, event: CaptureEvent) -> None:
        if self.session.manual_stop_requested:
            return
        self.transcript.interim_text = event.text
        if event.text:
            self._notify(self.on_interim, event.text)

    def _handle_error(self, event: CaptureEvent) -> None:
        code = event.error_code or "unknown"
        kind = classify_error(code)
        severity = severity_of(kind)

        if severity is ErrorSeverity.BENIGN:
            logger.debug(f"Ignoring benign capture error: {code}")
            return

        self._session_severity = ErrorSeverity.FATAL
        self._start_pending = False
        self.error = error_message(kind, code)
        self.error_kind = kind
        self.session.status = CaptureStatus.ERROR
        self.transcript.interim_text = ""
        logger.error(f"Fatal capture error '{code}': {event.error_message or self.error}")

        self._notify(self.on_error, self.error, code)

        if self.provider is not None:
            try:
                self.provider.abort()
            except CaptureProviderError as e:
                logger.debug(f"Provider abort after fatal error failed: {e}")

    # ------------------------------------------------------------------
    # Helpers

    def _request_provider_start(self) -> bool:
        """Ask the provider for a session; False if one is still open."""
        try:
            self.provider.start()
        except CaptureAlreadyStartedError:
            logger.debug("Provider already started; ignoring start request")
            return False
        except CaptureProviderError as e:
            self.dispatch(CaptureEvent(CaptureEventKind.ERROR, error_code=e.code, error_message=e.message))
        return True

    def _notify(self, callback: Optional[Callable], *args) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"Error in capture callback {getattr(callback, '__name__', callback)}: {e}")

    def _check_not_disposed(self) -> None:
        if self._disposed:
            raise RuntimeError("SpeechCaptureEngine has been disposed")
