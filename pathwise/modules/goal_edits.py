"""
Inline Edits at the Goal Wizard Confirmation Step.

Lets the user correct fields of the draft in free text ("target is 5000",
"change the deadline to June 2028 and priority to low") without restarting
the wizard.

Extraction works in three passes:
    1. Find every field keyword. Where keyword matches overlap, the longest
       one claims the span ("saved amount" is a saved-amount keyword, not a
       target keyword).
    2. Each kept keyword owns the text up to the next kept keyword.
    3. Connector words ("is", "to", ":", "and", "change", "set") are
       stripped and the remainder is parsed with that field's rules.

All matched fields are applied, in the order they appear in the message.

Reference: goal_wizard_handlers.py (CONFIRM step)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from pathwise.modules.goal_intents import is_nothing
from pathwise.modules.goal_models import GoalDraft, format_amount
from pathwise.modules.goal_parsing import (
    DateParseStatus,
    parse_amount,
    parse_category,
    parse_deadline,
    parse_priority,
)

# Field family -> keyword patterns
_FIELD_KEYWORDS: dict[str, list[str]] = {
    "name": [r"goal name", r"name", r"title"],
    "category": [r"categor\w*"],
    "target_amount": [r"target amount", r"goal amount", r"target", r"amount", r"total"],
    "saved_amount": [r"saved amount", r"already saved", r"saved", r"already"],
    "deadline": [r"target date", r"due date", r"deadline", r"date"],
    "monthly_savings_target": [
        r"monthly savings", r"monthly amount", r"monthly rate", r"per month",
        r"monthly", r"month",
    ],
    "priority": [r"priority"],
}

_KEYWORD_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(rf"\b{keyword}\b", re.IGNORECASE), field_name)
    for field_name, keywords in _FIELD_KEYWORDS.items()
    for keyword in keywords
]

_LEADING_CONNECTORS = re.compile(
    r"^(?:[\s:=,]|\b(?:is|to|should be|will be|be|as|of|into|now)\b)+",
    re.IGNORECASE,
)
_TRAILING_CONNECTORS = re.compile(
    r"(?:[\s,;.]|\b(?:and|also|plus|change|set|make|update|the|my|its)\b)+$",
    re.IGNORECASE,
)

EDIT_EXAMPLES = (
    "• 'target is 5000'\n"
    "• 'saved amount is 750'\n"
    "• 'change the deadline to June 2028'\n"
    "• 'monthly 250'\n"
    "• 'priority to low'\n"
    "• 'category: travel'"
)


@dataclass
class EditResult:
    """Outcome of ``apply_inline_edits``.

    Attributes:
        applied: Field names changed on the draft, in message order
        rejected: (field name, reason) for fields whose value did not parse
    """

    applied: list[str] = field(default_factory=list)
    rejected: list[tuple[str, str]] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.applied)


@dataclass(frozen=True)
class _KeywordSpan:
    start: int
    end: int
    field_name: str


def _find_keywords(text: str) -> list[_KeywordSpan]:
    candidates = [
        _KeywordSpan(match.start(), match.end(), field_name)
        for pattern, field_name in _KEYWORD_PATTERNS
        for match in pattern.finditer(text)
    ]
    # Longest first, so longer keywords claim overlapping spans.
    candidates.sort(key=lambda span: (-(span.end - span.start), span.start))

    kept: list[_KeywordSpan] = []
    for span in candidates:
        if all(span.end <= other.start or span.start >= other.end for other in kept):
            kept.append(span)
    return sorted(kept, key=lambda span: span.start)


def extract_field_values(text: str) -> list[tuple[str, str]]:
    """Split an edit message into (field name, raw value) pairs.

    Args:
        text: The user's message at the CONFIRM step

    Returns:
        Pairs in message order; a field may appear more than once
    """
    spans = _find_keywords(text)
    values: list[tuple[str, str]] = []
    for index, span in enumerate(spans):
        stop = spans[index + 1].start if index + 1 < len(spans) else len(text)
        raw = text[span.end:stop]
        raw = _LEADING_CONNECTORS.sub("", raw)
        raw = _TRAILING_CONNECTORS.sub("", raw)
        values.append((span.field_name, raw.strip().strip("'\"")))
    return values


def _apply_one(draft: GoalDraft, field_name: str, value: str, today: date) -> str | None:
    """Apply one field edit. Returns a rejection reason, or None on success."""
    if not value:
        return "I didn't catch the new value."

    if field_name == "name":
        draft.name = value
        return None

    if field_name == "category":
        category = parse_category(value)
        if category is None:
            return f"'{value}' isn't one of the categories."
        draft.category = category
        return None

    if field_name == "target_amount":
        amount = parse_amount(value)
        if amount is None or amount <= 0:
            return "the target must be a positive amount."
        saved = draft.saved_amount or Decimal("0")
        if saved >= amount:
            return f"the target must be more than what you've saved ({format_amount(saved, draft.currency)})."
        draft.target_amount = amount
        return None

    if field_name == "saved_amount":
        amount = Decimal("0") if is_nothing(value) else parse_amount(value)
        if amount is None or amount < 0:
            return "the saved amount must be zero or more."
        if draft.target_amount is not None and amount >= draft.target_amount:
            return (
                "the saved amount must be less than your target "
                f"({format_amount(draft.target_amount, draft.currency)})."
            )
        draft.saved_amount = amount
        return None

    if field_name == "deadline":
        result = parse_deadline(value, today)
        if result.status == DateParseStatus.PAST:
            return "that date is in the past."
        if not result.ok:
            return f"I couldn't read '{value}' as a date."
        draft.deadline = result.value
        return None

    if field_name == "monthly_savings_target":
        amount = parse_amount(value)
        if amount is None or amount <= 0:
            return "the monthly amount must be positive."
        draft.monthly_savings_target = amount
        return None

    if field_name == "priority":
        priority = parse_priority(value)
        if priority is None:
            return "the priority must be HIGH, MEDIUM or LOW."
        draft.priority = priority
        return None

    raise ValueError(f"Unknown draft field: {field_name}")


def apply_inline_edits(draft: GoalDraft, text: str, today: date) -> EditResult:
    """Apply every field edit found in ``text`` to ``draft`` in place.

    Applying the same message twice leaves the draft as applying it once.

    Args:
        draft: The draft at the CONFIRM step
        text: The user's message
        today: The current date (for deadline validation)

    Returns:
        EditResult listing applied and rejected fields
    """
    result = EditResult()
    for field_name, value in extract_field_values(text):
        reason = _apply_one(draft, field_name, value, today)
        if reason is None:
            if field_name not in result.applied:
                result.applied.append(field_name)
        else:
            result.rejected.append((field_name, reason))
    return result
