"""
Common Value Objects

Value objects used across multiple domains:
- DateRange: Represents a range of dates (check-in to check-out)
- Bookable: A room or a whole accommodation that can be reserved

Also holds the helpers that translate the wire date format (DD/MM/YYYY)
into calendar dates. Dates are always parsed before any comparison; the
only string form that is safe to compare is the YYYYMMDD one returned by
comparable_date().
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

WIRE_DATE_FORMAT = "%d/%m/%Y"
COMPARABLE_DATE_FORMAT = "%Y%m%d"


class InvalidDateFormat(ValueError):
    """Raised when a date string is not in DD/MM/YYYY form."""


def parse_wire_date(value: str) -> date:
    """Parse a DD/MM/YYYY string into a date."""
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), WIRE_DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise InvalidDateFormat(f"Invalid date '{value}', expected DD/MM/YYYY") from None


def format_wire_date(value: date) -> str:
    return value.strftime(WIRE_DATE_FORMAT)


def comparable_date(value: str) -> str:
    """Return the sortable YYYYMMDD form of a DD/MM/YYYY string."""
    return parse_wire_date(value).strftime(COMPARABLE_DATE_FORMAT)


@dataclass(frozen=True)
class DateRange:
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    Used for booking periods, availability blocks and holiday windows.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    @classmethod
    def from_wire(cls, start: str, end: str) -> "DateRange":
        return cls(parse_wire_date(start), parse_wire_date(end))

    def overlaps_with(self, other: "DateRange") -> bool:
        """
        Check if this range overlaps with another

        end_date is exclusive, so adjacent ranges don't overlap:
            - DateRange(10, 12) overlaps with DateRange(11, 13) -> True
            - DateRange(10, 12) overlaps with DateRange(12, 14) -> False
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return self.start_date < other.end_date and self.end_date > other.start_date

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date < self.end_date

    def __len__(self) -> int:
        """Number of nights in the range."""
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{format_wire_date(self.start_date)} - {format_wire_date(self.end_date)}"


class BookableKind(str, Enum):
    ROOM = "room"
    UNIT = "unit"


@dataclass(frozen=True)
class Bookable:
    """A reservable target: an individual room or a whole accommodation."""
    kind: BookableKind
    id: int

    def __str__(self):
        return f"{self.kind.value}:{self.id}"
