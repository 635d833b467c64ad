"""
Goal Wizard Free-Text Parsers.

Pure functions turning free-text replies into amounts, deadlines,
categories and priorities, plus the calendar arithmetic the wizard needs.

Examples:
    "BD 3,000"     -> Decimal("3000")
    "end of 2026"  -> DateParseResult(OK, 2026-12-31)
    "Q3 2029"      -> DateParseResult(OK, 2029-09-30)
    "June"         -> DateParseResult(NEEDS_QUALIFIER)

Reference: goal_wizard.py (main module)
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from enum import StrEnum

from pathwise.models.goal import GoalCategory, GoalPriority
from pathwise.modules.goal_models import CATEGORY_LABELS

# Deadlines may be at most this many years ahead.
MAX_YEARS_AHEAD = 20


# =============================================================================
# Amounts
# =============================================================================

_AMOUNT_PATTERN = re.compile(
    r"(?P<sign>-)?\s*(?P<whole>\d[\d,]*)(?P<frac>\.\d+)?\s*(?P<k>k\b)?",
    re.IGNORECASE,
)


def parse_amount(text: str) -> Decimal | None:
    """Extract the first monetary amount from free text.

    Accepts thousands separators, a ``BD``/``BHD`` marker and a ``k`` suffix.
    A leading minus is kept so callers can reject negative amounts.

    Args:
        text: Raw user text

    Returns:
        The amount, or None if the text holds no number
    """
    match = _AMOUNT_PATTERN.search(text)
    if match is None:
        return None

    digits = match.group("whole").replace(",", "") + (match.group("frac") or "")
    try:
        amount = Decimal(digits)
    except InvalidOperation:
        return None

    if match.group("k"):
        amount *= 1000
    if match.group("sign"):
        amount = -amount
    return amount


# =============================================================================
# Deadlines
# =============================================================================

class DateParseStatus(StrEnum):
    """Outcome of parsing a deadline phrase."""

    OK = "ok"
    PAST = "past"
    NEEDS_QUALIFIER = "needs_qualifier"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class DateParseResult:
    """Tagged result of ``parse_deadline``. ``value`` is set for OK and PAST."""

    status: DateParseStatus
    value: date | None = None

    @property
    def ok(self) -> bool:
        return self.status == DateParseStatus.OK


_ISO_PATTERN = re.compile(r"\b(\d{4})-(\d{1,2})(?:-(\d{1,2}))?\b")
_SLASH_PATTERN = re.compile(r"\b(\d{1,2})/(\d{4})\b")
_WORD_PATTERN = re.compile(r"\b[a-z]{3,9}\b")
_YEAR_PATTERN = re.compile(r"\b(\d{4})\b")

_MONTH_NAMES = [name.lower() for name in calendar.month_name[1:]]
# "may" and "march" double as verbs: followed by another word (other than
# "of") they are not read as a month.
_VERB_MONTHS = frozenset({"may", "mar", "march"})
_VERB_FOLLOWER = re.compile(r"\s+(?!of\b)[a-z]")

# Qualifier word -> quarter-end month. Checked in order.
_QUALIFIERS: list[tuple[re.Pattern[str], int]] = [
    (re.compile(r"\bq1\b|\bbeginning\b|\bearly\b|\bstart\b"), 3),
    (re.compile(r"\bq2\b|\bmid\b|\bmiddle\b"), 6),
    (re.compile(r"\bq3\b"), 9),
    (re.compile(r"\bq4\b|\bend\b|\blate\b"), 12),
]

DEFAULT_QUALIFIER_MONTH = 12


def last_day_of_month(year: int, month: int) -> date:
    """Return the last calendar day of the given month."""
    return date(year, month, calendar.monthrange(year, month)[1])


def _month_from_words(text: str) -> int | None:
    # "jun", "june" and "sept" all name a month; "decide" does not.
    for match in _WORD_PATTERN.finditer(text):
        word = match.group()
        if word in _VERB_MONTHS and _VERB_FOLLOWER.match(text, match.end()):
            continue
        for number, name in enumerate(_MONTH_NAMES, start=1):
            if name.startswith(word):
                return number
    return None


def _qualifier_month(text: str) -> int | None:
    for pattern, month in _QUALIFIERS:
        if pattern.search(text):
            return month
    return None


def _resolve(year: int, month: int, today: date) -> DateParseResult:
    if not today.year <= year <= today.year + MAX_YEARS_AHEAD or not 1 <= month <= 12:
        return DateParseResult(DateParseStatus.UNRECOGNIZED)

    resolved = last_day_of_month(year, month)
    if resolved <= today:
        return DateParseResult(DateParseStatus.PAST, resolved)
    return DateParseResult(DateParseStatus.OK, resolved)


def parse_deadline(text: str, today: date) -> DateParseResult:
    """Parse a deadline phrase into the last day of the month it names.

    Strategies, first match wins:
        1. ``YYYY-MM[-DD]`` (day ignored)
        2. ``MM/YYYY``
        3. ``<MonthName> YYYY``
        4. ``<qualifier> YYYY`` where beginning/early/Q1 -> March,
           mid/Q2 -> June, Q3 -> September, end/late/Q4/none -> December

    Args:
        text: Raw user text
        today: The current date

    Returns:
        DateParseResult tagged OK, PAST, NEEDS_QUALIFIER or UNRECOGNIZED
    """
    lowered = text.strip().lower()

    match = _ISO_PATTERN.search(lowered)
    if match:
        return _resolve(int(match.group(1)), int(match.group(2)), today)

    match = _SLASH_PATTERN.search(lowered)
    if match:
        return _resolve(int(match.group(2)), int(match.group(1)), today)

    month = _month_from_words(lowered)
    if month is not None:
        match = _YEAR_PATTERN.search(lowered)
        if match is None:
            return DateParseResult(DateParseStatus.NEEDS_QUALIFIER)
        return _resolve(int(match.group(1)), month, today)

    qualifier = _qualifier_month(lowered)
    match = _YEAR_PATTERN.search(lowered)
    if match:
        return _resolve(int(match.group(1)), qualifier or DEFAULT_QUALIFIER_MONTH, today)

    if qualifier is not None:
        return DateParseResult(DateParseStatus.NEEDS_QUALIFIER)
    return DateParseResult(DateParseStatus.UNRECOGNIZED)


def months_until(deadline: date, today: date) -> int:
    """Calendar months from ``today`` to ``deadline``, at least 1."""
    return max(1, (deadline.year - today.year) * 12 + deadline.month - today.month)


def add_months(start: date, months: int) -> date:
    """Shift ``start`` by whole months, clamping the day to the month length."""
    index = start.year * 12 + start.month - 1 + months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(start.day, calendar.monthrange(year, month)[1]))


def _ceil_div(numerator: Decimal, denominator: Decimal) -> Decimal:
    return (numerator / denominator).to_integral_value(rounding=ROUND_CEILING)


def suggested_monthly_rate(remaining: Decimal, deadline: date, today: date) -> Decimal | None:
    """Whole-dinar monthly rate needed to save ``remaining`` by ``deadline``.

    Args:
        remaining: Target minus saved
        deadline: Goal deadline
        today: The current date

    Returns:
        ``ceil(remaining / months_until(deadline))``, or None if nothing remains
    """
    if remaining <= 0:
        return None
    return _ceil_div(remaining, Decimal(months_until(deadline, today)))


def derive_deadline(remaining: Decimal, monthly_rate: Decimal, today: date) -> date | None:
    """Deadline implied by saving ``monthly_rate`` per month.

    Args:
        remaining: Target minus saved
        monthly_rate: Planned monthly savings
        today: The current date

    Returns:
        ``today`` plus ``ceil(remaining / monthly_rate)`` months, or None if
        the rate is not positive
    """
    if monthly_rate <= 0:
        return None
    months = max(1, int(_ceil_div(max(remaining, Decimal("0")), monthly_rate)))
    return add_months(today, months)


# =============================================================================
# Categories and priorities
# =============================================================================

_CATEGORY_LOOKUP: dict[str, GoalCategory] = {}
for _category, _label in CATEGORY_LABELS.items():
    _CATEGORY_LOOKUP[_category.value.lower()] = _category
    _CATEGORY_LOOKUP[_label.lower()] = _category

# Name keyword -> category guess, checked in order.
_CATEGORY_HINTS: list[tuple[re.Pattern[str], GoalCategory]] = [
    (re.compile(r"\b(house|home|apartment|flat|property|villa)\b"), GoalCategory.PROPERTY),
    (re.compile(r"\b(cars?|tesla|vehicle|motorbike|bike)\b"), GoalCategory.VEHICLE),
    (re.compile(r"\b(travel|trip|vacation|holiday|flight)\b"), GoalCategory.TRAVEL),
    (re.compile(r"\b(education|study|studies|university|degree|masters|course)\b"),
     GoalCategory.EDUCATION),
    (re.compile(r"\b(emergency|rainy day)\b"), GoalCategory.EMERGENCY),
    (re.compile(r"\b(savings?|fund)\b"), GoalCategory.SAVINGS),
]


def parse_category(text: str) -> GoalCategory | None:
    """Match text case-insensitively against category codes and labels.

    Args:
        text: Raw user text

    Returns:
        The category, or None if the text names none exactly
    """
    normalized = " ".join(text.strip().lower().replace("_", " ").split())
    return _CATEGORY_LOOKUP.get(normalized)


def guess_category(goal_name: str) -> GoalCategory:
    """Guess a category from a goal name (used only as a hint)."""
    lowered = goal_name.lower()
    for pattern, category in _CATEGORY_HINTS:
        if pattern.search(lowered):
            return category
    return GoalCategory.OTHER


def parse_priority(text: str) -> GoalPriority | None:
    """Map free text to a priority.

    Exact (case-insensitive) HIGH/MEDIUM/LOW wins; otherwise the first letter
    decides: h -> HIGH, l -> LOW, anything else -> MEDIUM.

    Args:
        text: Raw user text

    Returns:
        The priority, or None for blank input
    """
    normalized = text.strip().upper()
    if not normalized:
        return None
    if normalized in GoalPriority.__members__:
        return GoalPriority(normalized)
    if normalized[0] == "H":
        return GoalPriority.HIGH
    if normalized[0] == "L":
        return GoalPriority.LOW
    return GoalPriority.MEDIUM
