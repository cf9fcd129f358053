"""
Price Resolution Service - resolves a package price with traceability.

Resolution order:
1. Tier: first group size tier containing the people count
2. Period: special date ranges first, then month names
3. Lookup: exact (period, tier, nights) cell in the pricing matrix

Each stage raises its own typed error; no stage swallows another's.
Resolution is side-effect free: identical inputs give identical output.
"""
import logging
from datetime import date
from typing import Optional, Protocol

from .errors import PackageInactive, PackageNotFound, PackageVersionChanged
from .models import Numeric, Package, Resolution, ResolutionRequest, TraceStep
from .period_resolver import resolve_period
from .price_lookup import lookup_price, pricing_matrix_frame
from .tier_resolver import resolve_tier

logger = logging.getLogger(__name__)


class PackageSource(Protocol):
    """Anything that can hand out packages by id."""

    def get_package(self, package_id: str) -> Optional[Package]:
        ...


class PriceResolutionService:
    """
    Core resolution service wrapping Tier → Period → Lookup.

    `resolve` works on a Package object; `resolve_request` looks the
    package up first and checks its status and version.
    """

    def __init__(self, packages: Optional[PackageSource] = None, pin_package_version: bool = True):
        self.packages = packages
        self.pin_package_version = pin_package_version

    def resolve(self, package: Package, people: int, nights: int, arrival_date: date) -> Resolution:
        """
        Resolve the price for one set of quote parameters.

        Args:
            package: Package holding the pricing table
            people: Number of people in the booking
            nights: Number of nights (must be an exact duration option)
            arrival_date: Arrival date used to pick the period

        Returns:
            Resolution with price, tier, period, currency and trace
        """
        trace = [TraceStep("Package", f"Resolving price for {package.name}", f"v{package.version}")]

        tier_index, tier = resolve_tier(people, package.group_size_tiers)
        trace.append(TraceStep(
            "Tier", f"{people} people fall in {tier.min_people}-{tier.max_people}", tier.label
        ))

        position, period = resolve_period(arrival_date, package.pricing_matrix)
        if period.period_type == 'special':
            rule = f"{period.start_date} to {period.end_date}"
        else:
            rule = "month of arrival"
        trace.append(TraceStep("Period", f"{arrival_date.isoformat()} matched {rule}", period.period))

        price = lookup_price(
            pricing_matrix_frame(package),
            position,
            tier_index,
            nights,
            period_label=period.period,
            tier_label=tier.label,
            duration_options=package.duration_options,
        )
        if isinstance(price, Numeric):
            trace.append(TraceStep("Price", f"{nights} nights", f"{package.currency} {price.amount:.2f}"))
        else:
            trace.append(TraceStep("Price", f"{nights} nights priced on request", str(price)))

        return Resolution(
            package_id=package.package_id,
            package_name=package.name,
            package_version=package.version,
            currency=package.currency,
            price=price,
            tier_index=tier_index,
            tier_label=tier.label,
            period=period.period,
            number_of_people=people,
            number_of_nights=nights,
            arrival_date=arrival_date,
            trace=tuple(trace),
        )

    def get_active_package(self, package_id: str, expected_version: Optional[int] = None) -> Package:
        """Fetch a package and check it can still be used for pricing."""
        package = self.packages.get_package(package_id) if self.packages else None
        if package is None or package.status == 'deleted':
            raise PackageNotFound(package_id)
        if package.status != 'active':
            raise PackageInactive(package_id, package.status)
        if (
            self.pin_package_version
            and expected_version is not None
            and expected_version != package.version
        ):
            raise PackageVersionChanged(package_id, expected_version, package.version)
        return package

    def resolve_request(self, request: ResolutionRequest) -> Resolution:
        """Resolve a contract request by package id."""
        package = self.get_active_package(request.package_id, request.expected_version)
        resolution = self.resolve(
            package,
            request.number_of_people,
            request.number_of_nights,
            request.arrival_date,
        )
        logger.debug("Resolved %s: %s", request, resolution.price)
        return resolution
