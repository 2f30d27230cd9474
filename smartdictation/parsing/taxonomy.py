"""Versioned H&P section taxonomy shared with the transcript parsing service."""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class SectionDefinition:
    """One note section the parser may produce."""
    id: str
    title: str


class SectionTaxonomy:
    """Ordered, versioned set of section ids and titles."""

    def __init__(self, version: int, sections: Tuple[SectionDefinition, ...]):
        ids = [s.id for s in sections]
        if len(ids) != len(set(ids)):
            raise ValueError("Section taxonomy contains duplicate ids")
        self.version = version
        self.sections = sections
        self._by_id: Dict[str, SectionDefinition] = {s.id: s for s in sections}

    def __iter__(self) -> Iterator[SectionDefinition]:
        return iter(self.sections)

    def __len__(self) -> int:
        return len(self.sections)

    def __contains__(self, section_id: str) -> bool:
        return section_id in self._by_id

    def ids(self) -> List[str]:
        return [s.id for s in self.sections]

    def is_known(self, section_id: str) -> bool:
        return section_id in self._by_id

    def title_for(self, section_id: str) -> Optional[str]:
        definition = self._by_id.get(section_id)
        return definition.title if definition else None


HP_SECTIONS = SectionTaxonomy(
    version=1,
    sections=(
        SectionDefinition("chief_complaint", "Today's Visit / Chief Complaint"),
        SectionDefinition("hpi", "HPI / Subjective / Objective"),
        SectionDefinition("past_medical_history", "Past Medical History"),
        SectionDefinition("past_surgical_history", "Past Surgical History"),
        SectionDefinition("health_maintenance", "Health Maintenance"),
        SectionDefinition("immunization_history", "Immunization History"),
        SectionDefinition("home_medications", "Home Medications"),
        SectionDefinition("allergies", "Allergies"),
        SectionDefinition("social_history", "Social History"),
        SectionDefinition("family_history", "Family History"),
        SectionDefinition("primary_care_provider", "Primary Care Provider"),
        # Review of systems
        SectionDefinition("ros_constitutional", "ROS - Constitutional"),
        SectionDefinition("ros_allergic", "ROS - Allergic / Immunologic"),
        SectionDefinition("ros_head", "ROS - Head"),
        SectionDefinition("ros_eyes", "ROS - Eyes"),
        SectionDefinition("ros_ent", "ROS - Ears, Nose, Mouth and Throat"),
        SectionDefinition("ros_neck", "ROS - Neck"),
        SectionDefinition("ros_breasts", "ROS - Breasts"),
        SectionDefinition("ros_respiratory", "ROS - Respiratory"),
        SectionDefinition("ros_cardiac", "ROS - Cardiac/Peripheral Vascular"),
        SectionDefinition("ros_gi", "ROS - Gastrointestinal"),
        SectionDefinition("ros_gu", "ROS - Genitourinary"),
        SectionDefinition("ros_musculoskeletal", "ROS - Musculoskeletal"),
        SectionDefinition("ros_skin", "ROS - Skin"),
        SectionDefinition("ros_neuro", "ROS - Neurological"),
        SectionDefinition("ros_psych", "ROS - Psychiatric"),
        SectionDefinition("ros_endo", "ROS - Endocrine"),
        SectionDefinition("ros_heme", "ROS - Hematologic/Lymphatic"),
        SectionDefinition("vital_signs", "Vital Signs"),
        SectionDefinition("physical_exam", "Physical Exam"),
        SectionDefinition("lab_results", "Lab Results"),
        SectionDefinition("imaging_results", "Imaging Results"),
        SectionDefinition("assessment", "Assessment/Problem List"),
        SectionDefinition("plan", "Plan"),
    ),
)
