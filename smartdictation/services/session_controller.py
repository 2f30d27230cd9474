"""Dictation session controller: capture, transcript parsing and section review."""

import logging
from typing import Iterable, List, Optional, Union

from ..capture.engine import SpeechCaptureEngine
from ..models.capture import CaptureStatus
from ..models.sections import ExistingSection, MergeMode, ParsedSection, SectionUpdate
from ..notifications.publisher import DictationNotifier
from ..parsing.client import TranscriptParseError, TranscriptParserClient
from ..parsing.schema import ParseDictationResponse
from ..parsing.taxonomy import HP_SECTIONS, SectionTaxonomy
from .reconciler import SectionReconciler

logger = logging.getLogger(__name__)

EMPTY_TRANSCRIPT_ERROR = "No transcript to parse. Please record some dictation first."
PARSE_FAILED_ERROR = "Failed to parse dictation. Please try again."


class DictationSessionController:
    """Drives one dictation: records speech, parses it, and holds the sections for review.

    The accumulated transcript is updated directly from the engine's
    transcript callback, so parse_transcript() always reads the latest text
    regardless of when the UI last refreshed.
    """

    def __init__(self,
                 engine: SpeechCaptureEngine,
                 parser_client: TranscriptParserClient,
                 taxonomy: SectionTaxonomy = HP_SECTIONS,
                 notifier: Optional[DictationNotifier] = None):
        """Initialize controller.

        Args:
            engine: Capture engine this controller owns
            parser_client: Client for the transcript parsing service
            taxonomy: Section ids accepted from the parser
            notifier: Optional publisher for user-facing error notifications
        """
        self.engine = engine
        self.parser_client = parser_client
        self.taxonomy = taxonomy
        self.notifier = notifier
        self.reconciler = SectionReconciler()

        self.transcript = ""
        self.parse_error: Optional[str] = None

        self._parse_generation = 0
        self._parses_in_flight = 0

        self.engine.on_transcript = self._on_transcript
        self.engine.on_error = self._on_capture_error

    # ------------------------------------------------------------------
    # Recording

    @property
    def is_recording(self) -> bool:
        return self.engine.is_active

    @property
    def is_supported(self) -> bool:
        return self.engine.is_supported

    @property
    def capture_status(self) -> CaptureStatus:
        return self.engine.status

    @property
    def interim_transcript(self) -> str:
        return self.engine.interim_text

    @property
    def recording_error(self) -> Optional[str]:
        return self.engine.error

    def start_recording(self) -> None:
        self.engine.start()
        if not self.engine.is_supported:
            self._publish("capture_error", self.engine.error, None)

    def stop_recording(self) -> None:
        self.engine.stop()

    def toggle_recording(self) -> None:
        if self.is_recording:
            self.stop_recording()
        else:
            self.start_recording()

    def _on_transcript(self, text: str) -> None:
        self.transcript = text

    def _on_capture_error(self, message: str, code: Optional[str] = None) -> None:
        self._publish("capture_error", message, code)

    def _publish(self, kind: str, *args) -> None:
        """Send a notification; subscriber failures are logged, never raised."""
        if self.notifier is None:
            return
        try:
            getattr(self.notifier, kind)(*args)
        except Exception as e:
            logger.error(f"Error delivering {kind} notification: {e}")

    # ------------------------------------------------------------------
    # Parsing

    @property
    def is_parsing(self) -> bool:
        return self._parses_in_flight > 0

    @property
    def parsed_sections(self) -> List[ParsedSection]:
        return self.reconciler.sections

    async def parse_transcript(self) -> bool:
        """Send the accumulated transcript to the parser and load the resulting sections.

        Only the most recent call may change state: if another parse starts or
        the controller is reset while this one is waiting on the service, its
        response is discarded.

        Returns:
            True if new sections were loaded
        """
        transcript = self.transcript.strip()
        if not transcript:
            self.parse_error = EMPTY_TRANSCRIPT_ERROR
            logger.warning("Parse requested with an empty transcript")
            return False

        self._parse_generation += 1
        generation = self._parse_generation
        self._parses_in_flight += 1
        self.parse_error = None

        logger.info(f"Parsing transcript ({len(transcript)} chars, request #{generation})")
        try:
            response = await self.parser_client.parse(transcript)
        except TranscriptParseError as e:
            if generation != self._parse_generation:
                logger.info(f"Discarding failure of superseded parse request #{generation}")
                return False
            self.parse_error = e.message or PARSE_FAILED_ERROR
            logger.error(f"Transcript parse failed: {self.parse_error}")
            self._publish("parse_error", self.parse_error)
            return False
        finally:
            self._parses_in_flight -= 1

        if generation != self._parse_generation:
            logger.info(f"Discarding result of superseded parse request #{generation}")
            return False

        self.reconciler.replace_all(self._build_sections(response))
        logger.info(f"Parsed {len(self.reconciler.sections)} sections")
        return True

    def _build_sections(self, response: ParseDictationResponse) -> List[ParsedSection]:
        sections = []
        seen = set()
        for meta in response.section_meta:
            if not self.taxonomy.is_known(meta.id):
                logger.warning(f"Dropping section with unknown id '{meta.id}' "
                               f"(taxonomy v{self.taxonomy.version})")
                continue
            if meta.id in seen:
                logger.warning(f"Dropping duplicate section id '{meta.id}'")
                continue
            seen.add(meta.id)
            sections.append(ParsedSection(
                id=meta.id,
                title=meta.title,
                content=response.sections.get(meta.id, ""),
                selected=True,
            ))
        return sections

    # ------------------------------------------------------------------
    # Review

    def update_parsed_section(self, section_id: str, content: str) -> None:
        self.reconciler.update_content(section_id, content)

    def toggle_section_selection(self, section_id: str) -> None:
        self.reconciler.toggle_selection(section_id)

    def select_all_sections(self) -> None:
        self.reconciler.select_all()

    def deselect_all_sections(self) -> None:
        self.reconciler.deselect_all()

    def apply(self,
              existing: Iterable[ExistingSection],
              mode: Union[MergeMode, str] = MergeMode.APPEND) -> List[SectionUpdate]:
        """Note updates for the selected sections merged into existing content."""
        return self.reconciler.apply(existing, mode)

    def sections_with_existing(self, existing: Iterable[ExistingSection]) -> List[ParsedSection]:
        return self.reconciler.sections_with_existing(existing)

    # ------------------------------------------------------------------
    # Reset

    def clear_transcript(self) -> None:
        self.transcript = ""
        self.engine.reset()

    def reset(self) -> None:
        """Clear transcript, sections and errors; pending parse results are discarded."""
        self.transcript = ""
        self.reconciler.clear()
        self.parse_error = None
        self._parse_generation += 1
        self.engine.reset()
        logger.info("Dictation session reset")
