"""Main application entry point for SmartDictation."""

import sys
import json
import time
import asyncio
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from pubsub import pub
from rich.text import Text

from .capture.engine import SpeechCaptureEngine
from .config import SmartDictationConfig
from .models.sections import ExistingSection, MergeMode, SectionUpdate
from .notifications.publisher import CAPTURE_ERROR_TOPIC, PARSE_ERROR_TOPIC
from .notifications.publisher import DictationNotifier
from .parsing.client import TranscriptParserClient
from .services.session_controller import DictationSessionController
from .ui.review_screen import DictationReviewScreen

logger = logging.getLogger(__name__)


def load_existing_sections(path: Optional[str]) -> List[ExistingSection]:
    """Read existing note content from JSON.

    Accepts either a list of {"id": ..., "content": ...} objects or a mapping
    of section id to content.
    """
    if not path:
        return []

    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, dict):
        return [ExistingSection(id=key, content=str(value or "")) for key, value in data.items()]
    if isinstance(data, list):
        return [ExistingSection(id=item["id"], content=str(item.get("content") or "")) for item in data]
    raise ValueError(f"Unsupported existing-sections format in {path}")


class DictationApp:

    def __init__(self, config_path: str, log_level: Optional[str] = None):
        self.config = SmartDictationConfig(config_path)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.provider = None
        self.controller: Optional[DictationSessionController] = None

    def init(self) -> None:
        logger.info("Initializing services...")
        # Imported here so the rest of the package works without the audio stack installed
        from .capture.google_provider import GoogleStreamingCaptureProvider

        capture_settings = self.config.get_capture_settings()
        credentials_path = None
        if self.config.get('google_cloud.credentials_path'):
            credentials_path = self.config.get_google_credentials_path()

        self.provider = GoogleStreamingCaptureProvider(
            credentials_path=credentials_path,
            language=capture_settings["language"],
            continuous=capture_settings["continuous"],
            sample_rate=self.config.get('audio.sample_rate', 16000),
            chunk_size=self.config.get('audio.chunk_size', 1600),
            model=self.config.get('google_cloud.model', 'latest_long'),
            enable_automatic_punctuation=self.config.get('google_cloud.enable_automatic_punctuation', True),
        )
        engine = SpeechCaptureEngine(self.provider, **capture_settings)

        self.notifier = DictationNotifier()
        self.controller = DictationSessionController(
            engine=engine,
            parser_client=TranscriptParserClient(**self.config.get_parser_settings()),
            notifier=self.notifier,
        )
        self.screen = DictationReviewScreen(self.controller)

        pub.subscribe(self._on_capture_error, self.notifier.topic(CAPTURE_ERROR_TOPIC))
        pub.subscribe(self._on_parse_error, self.notifier.topic(PARSE_ERROR_TOPIC))

    def _on_capture_error(self, message: str, code: Optional[str] = None) -> None:
        self.screen.console.print(Text(f"❌ {message}", style="bold red"))

    def _on_parse_error(self, message: str) -> None:
        self.screen.console.print(Text(f"❌ {message}", style="bold red"))

    def record(self, duration: int) -> None:
        """Capture speech for `duration` seconds (or until a stop command is spoken)."""
        self.controller.start_recording()
        deadline = time.time() + duration
        last_shown = ""
        while time.time() < deadline:
            self.provider.process_events(timeout=0.2)
            if self.controller.transcript != last_shown:
                last_shown = self.controller.transcript
                self.screen.console.print(Text(f"📝 {last_shown}", style="dim"))
            if self.controller.engine.session.manual_stop_requested or self.controller.recording_error:
                break

        self.controller.stop_recording()
        # Let Google flush results for audio already sent
        self.provider.join(timeout=5.0)
        self.provider.process_events()
        self.screen.show_capture_status()

    def review(self, existing: List[ExistingSection], mode: MergeMode) -> List[SectionUpdate]:
        if not asyncio.run(self.controller.parse_transcript()):
            self.screen.show_sections(existing)
            return []

        self.screen.show_sections(existing)
        updates = self.controller.apply(existing, mode)
        self.screen.show_updates(updates, mode)
        return updates

    def cleanup(self) -> None:
        if self.controller:
            self.controller.engine.dispose()


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'logs/smartdictation.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("SmartDictation starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for SmartDictation."""
    parser = argparse.ArgumentParser(
        description="SmartDictation - dictate clinical notes into structured H&P sections",
        epilog='Say "stop dictation" to finish early.'
    )

    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to configuration YAML file"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--duration",
        type=int,
        default=60,
        help="Maximum recording duration in seconds (default: 60)"
    )

    parser.add_argument(
        "--merge-mode",
        type=str,
        choices=[mode.value for mode in MergeMode],
        help="How parsed sections combine with existing content (overrides config, default: append)"
    )

    parser.add_argument(
        "--existing",
        type=str,
        help="JSON file with the note's existing section content"
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Write the section updates to this JSON file instead of stdout"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="SmartDictation v0.1.0"
    )

    args = parser.parse_args()

    app = DictationApp(args.config, args.log_level)
    try:
        app.init()
        mode = MergeMode.parse(args.merge_mode or app.config.get('review.merge_mode', 'append'))
        existing = load_existing_sections(args.existing)

        app.record(args.duration)
        updates = app.review(existing, mode)

        payload = json.dumps([u.to_dict() for u in updates], indent=2, ensure_ascii=False)
        if args.output:
            Path(args.output).write_text(payload, encoding='utf-8')
            print(f"✅ Wrote {len(updates)} section update(s) to {args.output}")
        else:
            print(payload)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        app.cleanup()


if __name__ == "__main__":
    main()
