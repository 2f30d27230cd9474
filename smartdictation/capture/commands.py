"""Spoken dictation commands applied to final segments before accumulation."""

import re
import logging
from dataclasses import dataclass
from typing import Dict, List, Pattern, Tuple

logger = logging.getLogger(__name__)


# Spoken phrase -> literal inserted into the transcript
VOICE_COMMANDS: Dict[str, str] = {
    # Punctuation
    "period": ".",
    "full stop": ".",
    "dot": ".",
    "comma": ",",
    "question mark": "?",
    "exclamation point": "!",
    "exclamation mark": "!",
    "colon": ":",
    "semicolon": ";",
    "hyphen": "-",
    "dash": "-",
    "ellipsis": "...",

    # Quotes and brackets
    "open quote": '"',
    "close quote": '"',
    "quote": '"',
    "open parenthesis": "(",
    "left parenthesis": "(",
    "close parenthesis": ")",
    "right parenthesis": ")",
    "open bracket": "[",
    "close bracket": "]",

    # Line breaks
    "new line": "\n",
    "next line": "\n",
    "newline": "\n",
    "new paragraph": "\n\n",
    "next paragraph": "\n\n",

    # Symbols common in clinical notes
    "degree": "°",
    "degrees": "°",
    "percent": "%",
    "percentage": "%",
    "number sign": "#",
    "hashtag": "#",
    "at sign": "@",
    "ampersand": "&",
    "and sign": "&",
    "plus sign": "+",
    "minus sign": "-",
    "equals sign": "=",
    "forward slash": "/",
    "slash": "/",
    "backslash": "\\",
}

CONTROL_COMMANDS: Tuple[str, ...] = ("stop dictation", "end dictation", "stop recording", "end recording")


def _compile(phrases) -> List[Tuple[Pattern, str]]:
    # Longest phrases first so "open quote" wins over "quote"
    ordered = sorted(phrases, key=len, reverse=True)
    return [(re.compile(rf"\b{re.escape(p)}\b", re.IGNORECASE), p) for p in ordered]


_COMMAND_PATTERNS = _compile(VOICE_COMMANDS)
_CONTROL_PATTERNS = _compile(CONTROL_COMMANDS)

_SPACE_BEFORE_PUNCT = re.compile(r"[ \t]+([.,!?;:])")
_SPACE_AFTER_OPEN = re.compile(r"([(\[])[ \t]+")
_SPACE_BEFORE_CLOSE = re.compile(r"[ \t]+([)\]])")
_SPACE_AROUND_BREAK = re.compile(r"[ \t]*\n[ \t]*")


@dataclass
class CommandResult:
    """Outcome of the command pass over one segment."""
    text: str
    stop_requested: bool = False


def process_voice_commands(text: str) -> CommandResult:
    """Replace spoken commands with literals and detect control phrases.
    
    Args:
        text: Final segment as recognized
        
    Returns:
        CommandResult with the substituted text and whether a stop was spoken
    """
    processed = text
    stop_requested = False

    for pattern, phrase in _CONTROL_PATTERNS:
        if pattern.search(processed):
            stop_requested = True
            processed = pattern.sub("", processed)
            logger.debug(f"Control command detected: '{phrase}'")

    for pattern, phrase in _COMMAND_PATTERNS:
        literal = VOICE_COMMANDS[phrase]
        processed = pattern.sub(lambda _m: literal, processed)

    processed = _SPACE_BEFORE_PUNCT.sub(r"\1", processed)
    processed = _SPACE_AFTER_OPEN.sub(r"\1", processed)
    processed = _SPACE_BEFORE_CLOSE.sub(r"\1", processed)
    processed = _SPACE_AROUND_BREAK.sub("\n", processed)

    if stop_requested:
        processed = processed.strip(" \t")

    return CommandResult(text=processed, stop_requested=stop_requested)
