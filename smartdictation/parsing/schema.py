"""Wire models for the transcript parsing service."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ParseDictationRequest(BaseModel):
    transcript: str


class SectionMeta(BaseModel):
    id: str
    title: str


class ParseDictationResponse(BaseModel):
    """Successful response: section contents keyed by id, plus ordered metadata."""
    model_config = ConfigDict(populate_by_name=True)

    sections: Dict[str, str] = Field(default_factory=dict)
    section_meta: List[SectionMeta] = Field(default_factory=list, alias="sectionMeta")
    success: Optional[bool] = None
    section_count: Optional[int] = Field(default=None, alias="sectionCount")


class ErrorBody(BaseModel):
    """Error payload; either field may carry the human-readable message."""
    error: Optional[str] = None
    message: Optional[str] = None
