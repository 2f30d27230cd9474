"""Unit tests for spoken dictation commands."""

import pytest

from smartdictation.capture.commands import process_voice_commands


@pytest.mark.unit
class TestVoiceCommands:
    """Test cases for process_voice_commands."""

    def test_plain_text_unchanged(self):
        result = process_voice_commands("patient is comfortable at rest")

        assert result.text == "patient is comfortable at rest"
        assert result.stop_requested is False

    def test_punctuation(self):
        result = process_voice_commands("chest pain comma worse with exertion period")

        assert result.text == "chest pain, worse with exertion."

    def test_multi_word_command(self):
        result = process_voice_commands("any shortness of breath question mark")

        assert result.text == "any shortness of breath?"

    def test_case_insensitive(self):
        assert process_voice_commands("Denies fever Period").text == "Denies fever."

    def test_whole_words_only(self):
        result = process_voice_commands("periodic fevers in the commander")

        assert result.text == "periodic fevers in the commander"

    def test_parentheses(self):
        result = process_voice_commands("aspirin open parenthesis daily close parenthesis")

        assert result.text == "aspirin (daily)"

    def test_new_line(self):
        assert process_voice_commands("History new line Fever").text == "History\nFever"

    def test_new_paragraph(self):
        assert process_voice_commands("Assessment new paragraph Plan").text == "Assessment\n\nPlan"

    @pytest.mark.parametrize("phrase", ["stop dictation", "End Dictation", "stop recording", "end recording"])
    def test_control_commands(self, phrase):
        result = process_voice_commands(f"no acute distress {phrase}")

        assert result.stop_requested is True
        assert result.text == "no acute distress"

    def test_control_command_alone(self):
        result = process_voice_commands("stop dictation")

        assert result.stop_requested is True
        assert result.text == ""
