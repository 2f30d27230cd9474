"""Terminal review screen for dictated transcripts and parsed sections."""

import logging
from typing import List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.capture import CaptureStatus
from ..models.sections import ExistingSection, MergeMode, SectionUpdate
from ..services.session_controller import DictationSessionController

logger = logging.getLogger(__name__)

_STATUS_STYLE = {
    CaptureStatus.IDLE: ("⏹️  STOPPED", "bold yellow"),
    CaptureStatus.LISTENING: ("🔴 RECORDING", "bold red"),
    CaptureStatus.RESTARTING: ("🔄 RECONNECTING", "bold cyan"),
    CaptureStatus.ERROR: ("❌ ERROR", "bold red"),
}


class DictationReviewScreen:
    """Renders capture state, parsed sections and the merge preview with rich."""

    def __init__(self, controller: DictationSessionController, console: Optional[Console] = None):
        self.controller = controller
        self.console = console or Console()

    def show_capture_status(self) -> None:
        """Print the capture state, transcript so far and any recording error."""
        label, style = _STATUS_STYLE[self.controller.capture_status]
        self.console.print(label, style=style)

        if not self.controller.is_supported:
            self.console.print("Voice dictation is not supported on this platform.", style="red")

        if self.controller.recording_error:
            self.console.print(Text(f"Error: {self.controller.recording_error}", style="red"))

        body = Text(self.controller.transcript or "")
        if self.controller.interim_transcript:
            if body:
                body.append(" ")
            body.append(self.controller.interim_transcript, style="dim italic")
        if not body:
            body = Text("Listening for speech..." if self.controller.is_recording
                        else "No dictation yet - start recording to begin", style="dim")
        self.console.print(Panel(body, title="📝 Transcript"))

    def build_sections_table(self, existing: Sequence[ExistingSection] = ()) -> Table:
        with_existing = {s.id for s in self.controller.sections_with_existing(existing)}

        table = Table(title="Parsed Sections", show_lines=True)
        table.add_column("Use", justify="center", width=4)
        table.add_column("Section", style="bold")
        table.add_column("Content")
        table.add_column("Existing", justify="center")

        for section in self.controller.parsed_sections:
            table.add_row(
                "✅" if section.selected else "⬜",
                # Dictated text is never parsed as rich markup
                Text.assemble(section.title, "\n", (section.id, "dim")),
                Text(section.content) if section.content else Text("(empty)", style="dim"),
                "⚠️" if section.id in with_existing else "",
            )
        return table

    def show_sections(self, existing: Sequence[ExistingSection] = ()) -> None:
        """Print parsed sections, flagging the ones that would merge into existing content."""
        if self.controller.parse_error:
            self.console.print(Text(f"Parse error: {self.controller.parse_error}", style="red"))

        if not self.controller.parsed_sections:
            self.console.print("No sections were identified in the dictation.", style="yellow")
            self.console.print("Try dictating more specific clinical information.", style="dim")
            return

        self.console.print(self.build_sections_table(existing))

        overlapping = self.controller.sections_with_existing(existing)
        if overlapping:
            self.console.print(f"⚠️  {len(overlapping)} section(s) already have content in the note",
                               style="yellow")

    def show_updates(self, updates: List[SectionUpdate], mode: MergeMode) -> None:
        """Print the content that will be written to the note."""
        self.console.print(f"\nMerge mode: [bold]{mode.value}[/bold] - {len(updates)} section(s) to apply")
        for update in updates:
            self.console.print(Panel(Text(update.content), title=Text(update.id), title_align="left"))
