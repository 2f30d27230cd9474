"""Data models for parsed clinical note sections and merging."""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class MergeMode(Enum):
    """How new dictated content is combined with existing note content."""
    REPLACE = "replace"
    APPEND = "append"
    PREPEND = "prepend"

    @classmethod
    def parse(cls, value: Union["MergeMode", str]) -> "MergeMode":
        """Return the MergeMode for an enum member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(mode.value for mode in cls)
            raise ValueError(f"Unknown merge mode '{value}' (expected one of: {valid})")


@dataclass
class ParsedSection:
    """One structured note section produced by the transcript parser."""
    id: str
    title: str
    content: str
    selected: bool = True


@dataclass
class ExistingSection:
    """Section content already present in the note editor (read-only input)."""
    id: str
    content: str


@dataclass
class SectionUpdate:
    """Content to write into one note field."""
    id: str
    content: str

    def to_dict(self) -> dict:
        return {"id": self.id, "content": self.content}
