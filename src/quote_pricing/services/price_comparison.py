"""
Price Comparison - old vs recalculated price for a linked quote.

Used to preview a recalculation before applying it.
"""
from dataclasses import dataclass
from typing import Optional

from ..engine.models import Numeric, Resolution


@dataclass(frozen=True)
class PriceComparison:
    old_price: float
    new_price: float
    difference: float
    percentage_change: float
    currency: str
    version_changed: bool = False
    linked_version: Optional[int] = None
    current_version: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            'oldPrice': self.old_price,
            'newPrice': self.new_price,
            'priceDifference': self.difference,
            'percentageChange': self.percentage_change,
            'currency': self.currency,
            'versionChanged': self.version_changed,
            'linkedVersion': self.linked_version,
            'currentVersion': self.current_version,
        }


def compare_prices(
    old_price: float,
    resolution: Resolution,
    linked_version: Optional[int] = None,
) -> PriceComparison:
    """
    Compare a quote's current price with a fresh resolution.

    Raises ValueError for ON_REQUEST resolutions, which have no number
    to compare against.
    """
    if not isinstance(resolution.price, Numeric):
        raise ValueError('The package pricing is set to "ON REQUEST" for these parameters')

    new_price = resolution.price.amount
    difference = new_price - old_price
    percentage = round(difference / old_price * 100, 2) if old_price > 0 else 0.0

    return PriceComparison(
        old_price=old_price,
        new_price=new_price,
        difference=difference,
        percentage_change=percentage,
        currency=resolution.currency,
        version_changed=linked_version is not None and linked_version != resolution.package_version,
        linked_version=linked_version,
        current_version=resolution.package_version,
    )
