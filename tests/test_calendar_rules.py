"""Unit tests for the pure date rules."""

from datetime import date
from types import SimpleNamespace

import pytest

from app.calendar.rules import (
    find_overlap,
    is_contained,
    ranges_overlap,
    validate_containment,
    validate_date_range,
)
from app.core.enums import RuleKind
from app.core.exceptions import CalendarValidationError


def _period(name: str, start: date, end: date) -> SimpleNamespace:
    return SimpleNamespace(name=name, start_date=start, end_date=end)


def test_date_range_requires_start_before_end() -> None:
    validate_date_range(date(2024, 9, 1), date(2025, 6, 30), "Academic year")
    with pytest.raises(CalendarValidationError) as exc:
        validate_date_range(date(2025, 6, 30), date(2024, 9, 1), "Academic year")
    assert exc.value.kind is RuleKind.INVALID_RANGE
    assert exc.value.status_code == 400


def test_equal_start_and_end_is_invalid() -> None:
    with pytest.raises(CalendarValidationError) as exc:
        validate_date_range(date(2024, 9, 1), date(2024, 9, 1), "Term")
    assert exc.value.kind is RuleKind.INVALID_RANGE
    assert exc.value.message.startswith("Term:")


def test_closed_intervals_sharing_one_day_overlap() -> None:
    assert ranges_overlap(date(2024, 1, 1), date(2024, 6, 30), date(2024, 6, 30), date(2024, 12, 31))


def test_adjacent_intervals_do_not_overlap() -> None:
    assert not ranges_overlap(date(2024, 1, 1), date(2024, 6, 29), date(2024, 6, 30), date(2024, 12, 31))


def test_containing_interval_overlaps() -> None:
    assert ranges_overlap(date(2024, 1, 1), date(2024, 12, 31), date(2024, 3, 1), date(2024, 4, 1))
    assert ranges_overlap(date(2024, 3, 1), date(2024, 4, 1), date(2024, 1, 1), date(2024, 12, 31))


def test_find_overlap_returns_first_clashing_sibling() -> None:
    siblings = [
        _period("2023-2024", date(2023, 9, 1), date(2024, 6, 30)),
        _period("2024-2025", date(2024, 9, 1), date(2025, 6, 30)),
    ]
    clash = find_overlap(date(2025, 1, 1), date(2025, 12, 31), siblings)
    assert clash is not None and clash.name == "2024-2025"
    assert find_overlap(date(2025, 7, 1), date(2026, 6, 30), siblings) is None
    assert find_overlap(date(2025, 7, 1), date(2026, 6, 30), []) is None


def test_containment_is_inclusive_on_both_ends() -> None:
    assert is_contained(date(2024, 9, 1), date(2025, 6, 30), date(2024, 9, 1), date(2025, 6, 30))
    assert not is_contained(date(2024, 8, 31), date(2024, 12, 20), date(2024, 9, 1), date(2025, 6, 30))
    assert not is_contained(date(2025, 1, 1), date(2025, 7, 1), date(2024, 9, 1), date(2025, 6, 30))


def test_validate_containment_names_the_parent_year() -> None:
    year = _period("2024-2025", date(2024, 9, 1), date(2025, 6, 30))
    validate_containment(date(2024, 9, 1), date(2024, 12, 20), year)
    with pytest.raises(CalendarValidationError) as exc:
        validate_containment(date(2024, 8, 1), date(2024, 9, 15), year)
    assert exc.value.kind is RuleKind.OUT_OF_BOUNDS
    assert "2024-2025" in exc.value.message
