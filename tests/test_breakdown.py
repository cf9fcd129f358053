
from quote_pricing.engine.breakdown import present_breakdown
from quote_pricing.engine.models import ON_REQUEST, Numeric

from conftest import JANUARY_DATE


def test_per_unit_figures():
    breakdown = present_breakdown(600.0, 4, 2, 3)
    assert breakdown.total_price == 600.0
    assert breakdown.per_person == 150.0
    assert breakdown.per_room == 300.0
    assert breakdown.per_night == 200.0


def test_zero_counts_have_no_figure():
    breakdown = present_breakdown(Numeric(300.0), 0, 0, 2)
    assert breakdown.per_person is None
    assert breakdown.per_room is None
    assert breakdown.per_night == 150.0


def test_missing_counts_have_no_figure():
    breakdown = present_breakdown(300.0)
    assert breakdown.per_person is None
    assert breakdown.per_room is None
    assert breakdown.per_night is None


def test_on_request_has_no_figures():
    for price in (ON_REQUEST, "ON_REQUEST"):
        breakdown = present_breakdown(price, 4, 2, 3)
        assert breakdown.total_price is None
        assert breakdown.per_person is None
        assert breakdown.per_room is None
        assert breakdown.per_night is None


def test_labels_come_from_resolution(service, package):
    resolution = service.resolve(package, 5, 2, JANUARY_DATE)
    breakdown = present_breakdown(resolution.price, 5, 1, 2, resolution=resolution)
    assert breakdown.per_person == 30.0
    assert breakdown.currency == "GBP"
    assert breakdown.tier_used == "Medium"
    assert breakdown.period_used == "January"


def test_overridden_total_uses_same_rules():
    # A manual total breaks down exactly like a resolved one
    assert present_breakdown(99.0, 3, 1, 1).per_person == 33.0
