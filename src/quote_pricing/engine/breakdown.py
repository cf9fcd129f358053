"""
Breakdown Presenter - per-person, per-room and per-night figures.

Pure and stateless. A figure is None when its count is zero (or
missing) or when the price is ON_REQUEST; nothing is ever divided by
zero.
"""
from dataclasses import dataclass
from typing import Optional

from .models import Numeric, Price, Resolution, parse_price


@dataclass(frozen=True)
class PriceBreakdown:
    """Derived per-unit figures for a quote price."""
    total_price: Optional[float]
    number_of_people: int = 0
    number_of_rooms: int = 0
    number_of_nights: int = 0
    per_person: Optional[float] = None
    per_room: Optional[float] = None
    per_night: Optional[float] = None
    currency: Optional[str] = None
    tier_used: Optional[str] = None
    period_used: Optional[str] = None


def _per(total: Optional[float], count: Optional[int]) -> Optional[float]:
    if total is None or not count or count <= 0:
        return None
    return total / count


def present_breakdown(
    total_price: Price | float,
    number_of_people: Optional[int] = None,
    number_of_rooms: Optional[int] = None,
    number_of_nights: Optional[int] = None,
    *,
    resolution: Optional[Resolution] = None,
) -> PriceBreakdown:
    """
    Derive the breakdown for a resolved or overridden total.

    `resolution`, when given, contributes currency/tier/period labels.
    """
    price = parse_price(total_price)
    total = price.amount if isinstance(price, Numeric) else None

    return PriceBreakdown(
        total_price=total,
        number_of_people=number_of_people or 0,
        number_of_rooms=number_of_rooms or 0,
        number_of_nights=number_of_nights or 0,
        per_person=_per(total, number_of_people),
        per_room=_per(total, number_of_rooms),
        per_night=_per(total, number_of_nights),
        currency=resolution.currency if resolution else None,
        tier_used=resolution.tier_label if resolution else None,
        period_used=resolution.period if resolution else None,
    )
