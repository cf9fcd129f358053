import os
import sys
from datetime import date

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from quote_pricing.engine.models import (
    ON_REQUEST, GroupSizeTier, Numeric, Package, PeriodEntry, PricePoint,
)
from quote_pricing.engine.pricing_engine import PriceResolutionService
from quote_pricing.services.package_service import PackageService


JANUARY_DATE = date(2027, 1, 15)


def make_package(**overrides) -> Package:
    """Tiers 1-3 Small / 4-6 Medium, January priced for 2 nights."""
    fields = dict(
        package_id="pkg-jan",
        name="Albufeira Weekend",
        currency="GBP",
        group_size_tiers=(
            GroupSizeTier("Small", 1, 3),
            GroupSizeTier("Medium", 4, 6),
        ),
        duration_options=(2,),
        pricing_matrix=(
            PeriodEntry("January", (
                PricePoint(0, 2, Numeric(100.0)),
                PricePoint(1, 2, Numeric(150.0)),
            )),
        ),
    )
    fields.update(overrides)
    return Package(**fields)


def make_seasonal_package(**overrides) -> Package:
    """Month periods for March/April plus an Easter special priced on request."""
    fields = dict(
        package_id="pkg-season",
        name="Benidorm Super Package",
        currency="EUR",
        group_size_tiers=(
            GroupSizeTier("6-11 People", 6, 11),
            GroupSizeTier("12+ People", 12, 40),
        ),
        duration_options=(2, 3),
        pricing_matrix=(
            PeriodEntry("April", (
                PricePoint(0, 2, Numeric(139.0)),
                PricePoint(0, 3, Numeric(179.0)),
                PricePoint(1, 2, Numeric(129.0)),
                PricePoint(1, 3, Numeric(169.0)),
            )),
            PeriodEntry(
                "Easter",
                (
                    PricePoint(0, 2, ON_REQUEST),
                    PricePoint(0, 3, ON_REQUEST),
                    PricePoint(1, 2, ON_REQUEST),
                    PricePoint(1, 3, Numeric(999.0)),
                ),
                period_type="special",
                start_date=date(2027, 3, 25),
                end_date=date(2027, 3, 29),
            ),
            PeriodEntry("Mar", (
                PricePoint(0, 2, Numeric(119.0)),
                PricePoint(0, 3, Numeric(159.0)),
                PricePoint(1, 2, Numeric(109.0)),
            )),
        ),
    )
    fields.update(overrides)
    return Package(**fields)


@pytest.fixture
def package():
    return make_package()


@pytest.fixture
def seasonal_package():
    return make_seasonal_package()


@pytest.fixture
def package_service(package, seasonal_package):
    return PackageService.from_packages([package, seasonal_package])


@pytest.fixture
def service(package_service):
    return PriceResolutionService(package_service)
