"""
Common Value Objects

Value objects used across multiple domains:
- Money: Monetary amount in the loyalty-card currency
- DateRange: Stay period from check-in to check-out, both days inclusive
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from shared.domain.base import ValueObject
from shared.domain.exceptions import InvalidRangeError, ValidationError

CENT = Decimal('0.01')

DISPLAY_DATE_FORMAT = '%d.%m.%Y'


def round_money(amount: Decimal) -> Decimal:
    """Round half away from zero to whole cents"""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True, order=True)
class Money(ValueObject):
    """
    Money value object

    Single-currency amount (loyalty-card units). Immutable and never
    negative. Arithmetic is exact; call ``rounded()`` where a rounding
    rule applies.
    """
    amount: Decimal

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")

    @classmethod
    def zero(cls) -> 'Money':
        return cls(Decimal('0'))

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        return Money(self.amount + other.amount)

    def __sub__(self, other: 'Money') -> 'Money':
        """Subtract two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only subtract Money from Money")
        return Money(self.amount - other.amount)

    def __mul__(self, factor) -> 'Money':
        """Multiply money by a factor"""
        if not isinstance(factor, (int, float, Decimal)):
            raise TypeError("Can only multiply Money by number")
        return Money(self.amount * Decimal(str(factor)))

    __rmul__ = __mul__

    def rounded(self) -> 'Money':
        return Money(round_money(self.amount))

    def to_plain(self) -> str:
        """Amount in cents for JSON payloads, e.g. '1100.00'"""
        return str(round_money(self.amount))

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    def __str__(self):
        return f"{self.amount:,.2f}"

    def __repr__(self):
        return f"Money({self.amount})"


class DaySequence(Sequence):
    """
    Lazy sequence of calendar days between two dates, both inclusive

    Days are computed on access, so iterating twice yields the same days.
    """

    def __init__(self, first: date, last: date):
        self._first = first
        self._length = (last - first).days + 1

    def __len__(self) -> int:
        return self._length

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(self._length))]
        if index < 0:
            index += self._length
        if not 0 <= index < self._length:
            raise IndexError("day index out of range")
        return self._first + timedelta(days=index)

    def __repr__(self):
        return f"DaySequence({self._first}, {len(self)} days)"


def parse_day(value) -> date:
    """Accept a date, an ISO string (2026-12-10) or a display string (10.12.2026)"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        for fmt in ('%Y-%m-%d', DISPLAY_DATE_FORMAT):
            try:
                return datetime.strptime(value.strip(), fmt).date()
            except ValueError:
                continue
    raise ValidationError(f"Invalid date: {value!r}. Use YYYY-MM-DD or DD.MM.YYYY")


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a stay from check_in to check_out. A guest occupies the
    property through the check-out day, so both ends count when testing
    for conflicts and a check-out on another stay's check-in day overlaps.
    The number of nights is check_out - check_in.
    """
    check_in: date
    check_out: date

    def __post_init__(self):
        if self.check_out <= self.check_in:
            raise InvalidRangeError(
                f"Check-out date ({self.check_out}) must be after check-in date ({self.check_in})",
                check_in=self.check_in.isoformat(),
                check_out=self.check_out.isoformat(),
            )

    @classmethod
    def parse(cls, check_in, check_out) -> 'DateRange':
        return cls(parse_day(check_in), parse_day(check_out))

    def overlaps(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Both ends are inclusive:
            - DateRange(10, 12) overlaps with DateRange(11, 13) -> True
            - DateRange(10, 12) overlaps with DateRange(12, 14) -> True (same-day turnover)
            - DateRange(10, 12) overlaps with DateRange(13, 15) -> False
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        return self.check_in <= other.check_out and other.check_in <= self.check_out

    def contains(self, day: date) -> bool:
        """Check if a day is within this range (both ends inclusive)"""
        return self.check_in <= day <= self.check_out

    def nights(self) -> int:
        """Number of nights in this range"""
        return (self.check_out - self.check_in).days

    def enumerate_dates(self) -> DaySequence:
        """Every calendar day from check-in up to and including check-out"""
        return DaySequence(self.check_in, self.check_out)

    def __str__(self):
        return f"{self.check_in.strftime(DISPLAY_DATE_FORMAT)} - {self.check_out.strftime(DISPLAY_DATE_FORMAT)}"

    def __repr__(self):
        return f"DateRange({self.check_in}, {self.check_out})"
