from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from dateutil import parser as date_parser

INVALID_FORMAT = "Invalid date format"
FUTURE_DATE = "Date cannot be in the future"
TOO_FAR_IN_PAST = "Date is too far in the past"

LOOKBACK_YEARS = 2


@dataclass
class DateValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)
    normalized_date: datetime | None = None


def _parse(raw: str) -> datetime:
    text = raw.strip()
    if not text:
        raise ValueError("empty date")
    try:
        parsed = date_parser.isoparse(text)
    except ValueError:
        # Free-form text ("May 3, 2025", "05/03/2025"); missing parts fall back to midnight
        default = datetime.combine(datetime.now(UTC).date(), datetime.min.time())
        parsed = date_parser.parse(text, default=default)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _years_before(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        # Feb 29 has no counterpart in a common year; roll forward
        return moment.replace(year=moment.year - years, month=3, day=1)


def validate_cycle_date(raw: Any, now: datetime | None = None) -> DateValidationResult:
    """Parse a date extracted by the LLM and check it is a plausible cycle date.

    A date in the future or more than two years back is returned with
    ``normalized_date`` set but ``valid=False``; range errors accumulate.
    Only a parse failure leaves ``normalized_date`` empty.
    """
    if not isinstance(raw, str):
        return DateValidationResult(valid=False, errors=[INVALID_FORMAT])
    try:
        date = _parse(raw)
    except (ValueError, OverflowError):
        return DateValidationResult(valid=False, errors=[INVALID_FORMAT])

    now = now or datetime.now(UTC)
    result = DateValidationResult(valid=True, normalized_date=date)

    if date > now:
        result.valid = False
        result.errors.append(FUTURE_DATE)

    if date < _years_before(now, LOOKBACK_YEARS):
        result.valid = False
        result.errors.append(TOO_FAR_IN_PAST)

    return result
