"""Pure date rules shared by academic years and terms. All ranges are closed intervals."""

from datetime import date
from typing import Iterable, Optional, Protocol

from app.core.enums import RuleKind
from app.core.exceptions import CalendarValidationError


class DatedEntity(Protocol):
    name: str
    start_date: date
    end_date: date


def validate_date_range(start_date: date, end_date: date, context: str) -> None:
    if start_date >= end_date:
        raise CalendarValidationError(
            RuleKind.INVALID_RANGE,
            f"{context}: start_date must be before end_date",
        )


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    return start_a <= end_b and start_b <= end_a


def find_overlap(start_date: date, end_date: date, siblings: Iterable[DatedEntity]) -> Optional[DatedEntity]:
    """First sibling whose range intersects [start_date, end_date], if any."""
    for sibling in siblings:
        if ranges_overlap(start_date, end_date, sibling.start_date, sibling.end_date):
            return sibling
    return None


def is_contained(start_date: date, end_date: date, outer_start: date, outer_end: date) -> bool:
    return outer_start <= start_date and end_date <= outer_end


def validate_containment(start_date: date, end_date: date, parent: DatedEntity) -> None:
    if not is_contained(start_date, end_date, parent.start_date, parent.end_date):
        raise CalendarValidationError(
            RuleKind.OUT_OF_BOUNDS,
            f'Term dates must fall within academic year "{parent.name}" '
            f"({parent.start_date.isoformat()} to {parent.end_date.isoformat()})",
        )
