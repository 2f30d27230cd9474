"""Unit tests for the H&P section taxonomy."""

import pytest

from smartdictation.parsing.taxonomy import HP_SECTIONS, SectionDefinition, SectionTaxonomy


@pytest.mark.unit
class TestSectionTaxonomy:
    """Test cases for SectionTaxonomy."""

    def test_hp_sections(self):
        assert HP_SECTIONS.version == 1
        assert len(HP_SECTIONS) == 34
        assert HP_SECTIONS.ids()[0] == "chief_complaint"
        assert "allergies" in HP_SECTIONS
        assert HP_SECTIONS.is_known("made_up") is False

    def test_title_for(self):
        assert HP_SECTIONS.title_for("allergies") == "Allergies"
        assert HP_SECTIONS.title_for("made_up") is None

    def test_ids_are_unique(self):
        assert len(set(HP_SECTIONS.ids())) == len(HP_SECTIONS)

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError, match="duplicate"):
            SectionTaxonomy(version=2, sections=(
                SectionDefinition("hpi", "HPI"),
                SectionDefinition("hpi", "History of Present Illness"),
            ))

    def test_iteration_order(self):
        taxonomy = SectionTaxonomy(version=1, sections=(
            SectionDefinition("b", "B"),
            SectionDefinition("a", "A"),
        ))

        assert [s.id for s in taxonomy] == ["b", "a"]
