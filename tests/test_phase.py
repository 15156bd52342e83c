from datetime import UTC, datetime, timedelta

import pytest

from cycle_nlu.domain.phase import days_since, determine_cycle_phase
from cycle_nlu.models import CyclePhase


@pytest.mark.parametrize(
    "days,phase",
    [
        (0, CyclePhase.MENSTRUAL),
        (5, CyclePhase.MENSTRUAL),
        (6, CyclePhase.FOLLICULAR),
        (14, CyclePhase.FOLLICULAR),
        (15, CyclePhase.OVULATORY),
        (16, CyclePhase.OVULATORY),
        (17, CyclePhase.LUTEAL),
        (28, CyclePhase.LUTEAL),
        (29, CyclePhase.UNKNOWN),
        (-1, CyclePhase.UNKNOWN),
        (400, CyclePhase.UNKNOWN),
    ],
)
def test_phase_bands(days, phase):
    assert determine_cycle_phase(days) is phase


def test_days_since_floors_partial_days():
    now = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
    assert days_since(now - timedelta(days=3, hours=23), now=now) == 3
    assert days_since(now - timedelta(hours=1), now=now) == 0


def test_days_since_future_start_is_negative():
    now = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
    assert days_since(now + timedelta(hours=1), now=now) == -1


def test_days_since_treats_naive_as_utc():
    now = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
    assert days_since(datetime(2026, 10, 9, 12, 0), now=now) == 10
