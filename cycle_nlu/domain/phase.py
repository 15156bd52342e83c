from __future__ import annotations

from datetime import UTC, datetime

from cycle_nlu.models import CyclePhase

# Upper bound (inclusive) of each band, in days since the period started.
# A fixed 28-day textbook cycle; not personalised per user.
_PHASE_BANDS: list[tuple[int, CyclePhase]] = [
    (5, CyclePhase.MENSTRUAL),
    (14, CyclePhase.FOLLICULAR),
    (16, CyclePhase.OVULATORY),
    (28, CyclePhase.LUTEAL),
]


def determine_cycle_phase(days_since_period_start: int) -> CyclePhase:
    if days_since_period_start < 0:
        return CyclePhase.UNKNOWN
    for upper, phase in _PHASE_BANDS:
        if days_since_period_start <= upper:
            return phase
    return CyclePhase.UNKNOWN


def days_since(start: datetime, now: datetime | None = None) -> int:
    """Whole days elapsed from ``start`` to ``now``, floored."""
    now = now or datetime.now(UTC)
    if start.tzinfo is None:
        start = start.replace(tzinfo=UTC)
    return (now - start).days
