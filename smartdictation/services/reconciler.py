"""Section reconciliation: editing parsed sections and merging them into existing notes.

Every function here is pure. Inputs are never mutated; edits return new lists
of new ParsedSection objects.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Union

from ..models.sections import ExistingSection, MergeMode, ParsedSection, SectionUpdate

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n"


def update_content(sections: List[ParsedSection], section_id: str, content: str) -> List[ParsedSection]:
    """Replace the content of the section with the given id (no-op for unknown ids)."""
    return [replace(s, content=content) if s.id == section_id else s for s in sections]


def toggle_selection(sections: List[ParsedSection], section_id: str) -> List[ParsedSection]:
    return [replace(s, selected=not s.selected) if s.id == section_id else s for s in sections]


def set_all_selected(sections: List[ParsedSection], selected: bool) -> List[ParsedSection]:
    return [replace(s, selected=selected) for s in sections]


def merge_content(existing: Optional[str], new: str, mode: MergeMode) -> str:
    """Combine new content with existing content.

    Blank or missing existing content always yields the new content,
    whatever the mode.
    """
    if not existing or not existing.strip():
        return new
    if mode is MergeMode.REPLACE:
        return new
    if mode is MergeMode.APPEND:
        return f"{existing}{SECTION_SEPARATOR}{new}"
    if mode is MergeMode.PREPEND:
        return f"{new}{SECTION_SEPARATOR}{existing}"
    raise ValueError(f"Unsupported merge mode: {mode}")


def _index_existing(existing: Iterable[ExistingSection]) -> Dict[str, str]:
    # First entry wins when the editor reports an id twice
    index: Dict[str, str] = {}
    for section in existing:
        index.setdefault(section.id, section.content)
    return index


def apply_sections(sections: List[ParsedSection],
                   existing: Iterable[ExistingSection],
                   mode: Union[MergeMode, str] = MergeMode.APPEND) -> List[SectionUpdate]:
    """Build the note updates for every selected, non-blank parsed section.

    Args:
        sections: Parsed sections under review
        existing: Section content currently in the note
        mode: How to combine with non-blank existing content

    Returns:
        One SectionUpdate per applied section, in parsed order
    """
    merge_mode = MergeMode.parse(mode)
    existing_by_id = _index_existing(existing)

    updates = []
    for section in sections:
        if not section.selected or not section.content.strip():
            continue
        content = merge_content(existing_by_id.get(section.id), section.content, merge_mode)
        updates.append(SectionUpdate(id=section.id, content=content))

    logger.debug(f"Prepared {len(updates)} section updates ({merge_mode.value})")
    return updates


def sections_with_existing(sections: List[ParsedSection],
                           existing: Iterable[ExistingSection]) -> List[ParsedSection]:
    """Parsed sections whose target field already has non-blank content."""
    existing_by_id = _index_existing(existing)
    return [s for s in sections if (existing_by_id.get(s.id) or "").strip()]


class SectionReconciler:
    """Holds the parsed sections under review and applies edits to them."""

    def __init__(self, sections: Optional[List[ParsedSection]] = None):
        self.sections: List[ParsedSection] = list(sections or [])

    def replace_all(self, sections: List[ParsedSection]) -> None:
        self.sections = list(sections)

    def clear(self) -> None:
        self.sections = []

    def get(self, section_id: str) -> Optional[ParsedSection]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def update_content(self, section_id: str, content: str) -> None:
        self.sections = update_content(self.sections, section_id, content)

    def toggle_selection(self, section_id: str) -> None:
        self.sections = toggle_selection(self.sections, section_id)

    def select_all(self) -> None:
        self.sections = set_all_selected(self.sections, True)

    def deselect_all(self) -> None:
        self.sections = set_all_selected(self.sections, False)

    def selected(self) -> List[ParsedSection]:
        return [s for s in self.sections if s.selected]

    def apply(self,
              existing: Iterable[ExistingSection],
              mode: Union[MergeMode, str] = MergeMode.APPEND) -> List[SectionUpdate]:
        return apply_sections(self.sections, existing, mode)

    def sections_with_existing(self, existing: Iterable[ExistingSection]) -> List[ParsedSection]:
        return sections_with_existing(self.sections, existing)
