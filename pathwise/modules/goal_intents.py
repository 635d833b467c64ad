"""
Goal Wizard Intent Detection.

Keyword and allow-list detectors for the replies the wizard reacts to:
goal-creation intent, "don't know", yes/skip, confirm and cancel.

Reference: goal_wizard.py (main module)
"""

from __future__ import annotations

import re
from collections import Counter

# Phrases that start the wizard from free chat
_CREATE_GOAL_PHRASES: list[str] = [
    "create a goal",
    "new goal",
    "save for",
    "want to save",
    "i want to buy",
    "planning to buy",
    "want to create",
    "add a goal",
]

_DONT_KNOW_PATTERN = re.compile(
    r"\b(idk|dunno|unsure|no idea|no clue|not sure|don't know|dont know|do not know)\b"
)

_SUGGESTION_REPLIES: set[str] = {
    "idk", "dunno", "not sure", "no idea", "i don't know", "don't know", "dont know",
    "i'm not sure", "suggest", "suggestions", "suggest something", "any ideas", "ideas",
}

_ESTIMATE_PATTERN = re.compile(
    r"\b(not sure|don't know|dont know|idk|no idea|help|estimate|suggest)\b"
)

_AFFIRMATIVE_REPLIES: set[str] = {
    "yes", "y", "yeah", "yep", "yup", "sure", "ok", "okay", "sounds good",
    "yes please", "go ahead", "use it", "use that",
}

_SKIP_REPLIES: set[str] = {
    "skip", "no", "n", "nope", "no thanks", "later", "not now", "skip it",
}

_CONFIRM_REPLIES: set[str] = _AFFIRMATIVE_REPLIES | {
    "confirm", "confirmed", "create", "create it", "save", "save it", "do it",
    "looks good", "correct", "all good", "yes create it",
}

_CANCEL_PATTERN = re.compile(r"cancel|stop|abort")

_EXIT_COMMANDS: set[str] = {"cancel", "stop", "abort", "quit", "exit"}

_NOTHING_REPLIES: set[str] = {"none", "nothing", "zero", "nil", "nothing yet", "not yet"}

_CONFIRM_LETTERS = Counter("confirm")
# Shared letters needed for a typo to count as "confirm"
FUZZY_CONFIRM_MIN_OVERLAP = 5
FUZZY_CONFIRM_MAX_LENGTH = 9
_WORD_PATTERN = re.compile(r"[a-z]+")


def normalize(text: str) -> str:
    """Lower-case, unify apostrophes, drop trailing punctuation, squeeze spaces."""
    lowered = text.strip().lower().replace("’", "'")
    lowered = lowered.rstrip(".!?")
    return " ".join(lowered.split())


def is_create_goal_intent(text: str) -> bool:
    """Whether free chat text asks to create a new goal."""
    lowered = normalize(text)
    return any(phrase in lowered for phrase in _CREATE_GOAL_PHRASES)


def is_dont_know(text: str) -> bool:
    """Whether the reply says the user does not know (e.g. "idk", "not sure")."""
    return _DONT_KNOW_PATTERN.search(normalize(text)) is not None


def is_suggestion_request(text: str) -> bool:
    """Whether the whole reply asks for goal ideas instead of naming a goal."""
    return normalize(text) in _SUGGESTION_REPLIES


def is_estimate_request(text: str) -> bool:
    """Whether the reply asks for help estimating an amount."""
    return _ESTIMATE_PATTERN.search(normalize(text)) is not None


def is_affirmative(text: str) -> bool:
    return normalize(text) in _AFFIRMATIVE_REPLIES


def is_skip(text: str) -> bool:
    return normalize(text) in _SKIP_REPLIES


def is_nothing(text: str) -> bool:
    """Whether the reply means "zero" (e.g. "none", "nothing")."""
    return normalize(text) in _NOTHING_REPLIES


def is_exit_command(text: str) -> bool:
    """Whether the reply is a bare command to leave the wizard."""
    return normalize(text) in _EXIT_COMMANDS


def is_fuzzy_confirm(text: str) -> bool:
    """Typo-tolerant detector for "confirm".

    A reply matches when any of its words starts with "confir", or when its
    first word has at most nine letters and shares at least five of the seven
    letters of "confirm" (counting repeats once per occurrence in "confirm").
    Later words are not overlap-tested: "name is uniform fund" is an edit.

    Args:
        text: Raw user text

    Returns:
        True if the reply reads as a (possibly misspelt) "confirm"
    """
    words = _WORD_PATTERN.findall(normalize(text))
    if not words:
        return False
    if any(word.startswith("confir") for word in words):
        return True
    first = words[0]
    if len(first) > FUZZY_CONFIRM_MAX_LENGTH:
        return False
    overlap = sum((Counter(first) & _CONFIRM_LETTERS).values())
    return overlap >= FUZZY_CONFIRM_MIN_OVERLAP


def is_confirm(text: str) -> bool:
    """Whether a CONFIRM-step reply confirms the draft."""
    return normalize(text) in _CONFIRM_REPLIES or is_fuzzy_confirm(text)


def is_cancel(text: str) -> bool:
    """Whether a CONFIRM-step reply cancels: mentions cancel/stop/abort, or is exactly "no"."""
    lowered = normalize(text)
    return lowered == "no" or _CANCEL_PATTERN.search(lowered) is not None
