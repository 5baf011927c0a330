"""Order price composition.

Pure functions only: no database access, no clock. Everything the price
depends on is passed in so the rules can be tested in isolation.

    total = base + holiday + rush + sold_out - discount
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

from .exceptions import OrderValidationError

CENT = Decimal("0.01")
HUNDRED = Decimal(100)

Number = Union[int, float, Decimal]


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _percent_of(amount: Decimal, percent: Number) -> Decimal:
    return amount * Decimal(str(percent)) / HUNDRED


@dataclass(frozen=True)
class HolidayWindow:
    """A holiday period with its surcharge expressed in percent of the base."""

    from_date: date
    to_date: date
    percent: int

    def touches(self, check_in: date, check_out: date) -> bool:
        # boundary equality on either end also counts as a match
        return (
            (check_in < self.to_date and check_out > self.from_date)
            or check_in == self.from_date
            or check_out == self.to_date
        )


@dataclass(frozen=True)
class PriceBreakdown:
    base: int
    holiday_surcharge: Decimal
    rush_surcharge: Decimal
    sold_out_surcharge: Decimal
    discount: Decimal
    total: Decimal

    def as_order_fields(self) -> dict:
        return {
            "price": self.base,
            "holiday_price": self.holiday_surcharge,
            "rush_price": self.rush_surcharge,
            "sold_out_price": self.sold_out_surcharge,
            "discount_price": self.discount,
            "total_price": self.total,
        }


def days_until_check_in(created_at: datetime, check_in: date) -> int:
    """Whole days between booking time and local midnight of the check-in day.

    Hours are divided by 24 and truncated toward zero, so 3 days and 23
    hours counts as 3.
    """
    check_in_at = datetime.combine(check_in, time.min, tzinfo=created_at.tzinfo)
    hours = (check_in_at - created_at).total_seconds() / 3600
    return int(hours / 24)


def holiday_percent(holidays: Iterable[HolidayWindow], check_in: date, check_out: date) -> int:
    return sum(holiday.percent for holiday in holidays if holiday.touches(check_in, check_out))


def compose_price(
    base_price_per_night: int,
    nights: int,
    check_in: date,
    check_out: date,
    created_at: datetime,
    holidays: Iterable[HolidayWindow] = (),
    discount_percent: Number = 0,
    *,
    rush_window_days: int = 3,
    rush_percent: Number = 5,
) -> PriceBreakdown:
    """Compute every price component of a stay.

    The discount is capped at base plus surcharges so the total can never
    go negative.
    """
    if nights <= 0:
        raise OrderValidationError("Check-out date must be after check-in date.")
    if not 0 <= Decimal(str(discount_percent)) <= HUNDRED:
        raise OrderValidationError("Discount percent must be between 0 and 100.")

    base = int(base_price_per_night) * nights
    base_amount = Decimal(base)

    holiday_surcharge = _money(_percent_of(base_amount, holiday_percent(holidays, check_in, check_out)))

    if days_until_check_in(created_at, check_in) <= rush_window_days:
        rush_surcharge = _money(_percent_of(base_amount, rush_percent))
    else:
        rush_surcharge = _money(Decimal(0))

    sold_out_surcharge = _money(Decimal(0))

    gross = base_amount + holiday_surcharge + rush_surcharge + sold_out_surcharge
    discount = min(_money(_percent_of(base_amount, discount_percent)), gross)

    return PriceBreakdown(
        base=base,
        holiday_surcharge=holiday_surcharge,
        rush_surcharge=rush_surcharge,
        sold_out_surcharge=sold_out_surcharge,
        discount=discount,
        total=_money(gross - discount),
    )
