"""Transcript parsing: section taxonomy and the parsing service client."""

from .taxonomy import HP_SECTIONS, SectionDefinition, SectionTaxonomy
from .schema import ParseDictationResponse, SectionMeta
from .client import TranscriptParserClient, TranscriptParseError

__all__ = [
    "HP_SECTIONS",
    "SectionDefinition",
    "SectionTaxonomy",
    "ParseDictationResponse",
    "SectionMeta",
    "TranscriptParserClient",
    "TranscriptParseError",
]
