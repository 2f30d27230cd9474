"""Services layer for SmartDictation session logic."""

from .reconciler import SectionReconciler, apply_sections, merge_content, sections_with_existing
from .session_controller import DictationSessionController

__all__ = [
    "SectionReconciler",
    "DictationSessionController",
    "apply_sections",
    "merge_content",
    "sections_with_existing",
]
