from datetime import date

import pytest

from quote_pricing.engine.errors import NoMatchingPeriod, NoMatchingTier, NoPriceForCombination
from quote_pricing.engine.models import ON_REQUEST, GroupSizeTier, Numeric, PeriodEntry
from quote_pricing.engine.period_resolver import month_number, resolve_period
from quote_pricing.engine.price_lookup import lookup_price, pivot_matrix, pricing_matrix_frame
from quote_pricing.engine.tier_resolver import resolve_tier


TIERS = (GroupSizeTier("Small", 1, 3), GroupSizeTier("Medium", 4, 6))


@pytest.mark.parametrize("people", [1, 2, 3])
def test_tier_small_bounds(people):
    index, tier = resolve_tier(people, TIERS)
    assert index == 0
    assert tier.label == "Small"


@pytest.mark.parametrize("people", [4, 5, 6])
def test_tier_medium_bounds(people):
    index, tier = resolve_tier(people, TIERS)
    assert index == 1
    assert tier.label == "Medium"


def test_tier_above_largest_max():
    with pytest.raises(NoMatchingTier) as exc:
        resolve_tier(7, TIERS)
    assert exc.value.context == {'requestedPeople': 7, 'maxPeople': 6}
    assert "maximum tier limit of 6" in exc.value.message


def test_tier_gap_is_not_covered():
    tiers = (GroupSizeTier("A", 1, 2), GroupSizeTier("B", 5, 8))
    with pytest.raises(NoMatchingTier):
        resolve_tier(3, tiers)


def test_tier_overlap_earliest_declared_wins():
    """Overlapping tiers are a defect; the first declared match is used."""
    tiers = (GroupSizeTier("Wide", 1, 10), GroupSizeTier("Narrow", 4, 6))
    index, tier = resolve_tier(5, tiers)
    assert (index, tier.label) == (0, "Wide")


def test_month_number_accepts_names_and_abbreviations():
    assert month_number("January") == 1
    assert month_number(" jan ") == 1
    assert month_number("SEPTEMBER") == 9
    assert month_number("Peak Season") is None


def test_period_special_checked_before_month(seasonal_package):
    position, entry = resolve_period(date(2027, 3, 27), seasonal_package.pricing_matrix)
    assert entry.period == "Easter"
    assert position == 1


def test_period_special_bounds_are_inclusive(seasonal_package):
    _, start = resolve_period(date(2027, 3, 25), seasonal_package.pricing_matrix)
    _, end = resolve_period(date(2027, 3, 29), seasonal_package.pricing_matrix)
    _, after = resolve_period(date(2027, 3, 30), seasonal_package.pricing_matrix)
    assert start.period == "Easter"
    assert end.period == "Easter"
    assert after.period == "Mar"


def test_period_month_match(seasonal_package):
    _, entry = resolve_period(date(2027, 4, 10), seasonal_package.pricing_matrix)
    assert entry.period == "April"


def test_period_outside_all_periods(seasonal_package):
    with pytest.raises(NoMatchingPeriod) as exc:
        resolve_period(date(2027, 8, 1), seasonal_package.pricing_matrix)
    assert exc.value.context['availablePeriods'] == ["April", "Easter", "Mar"]


def test_period_special_without_dates_never_matches():
    periods = (PeriodEntry("Festival", period_type="special"),)
    with pytest.raises(NoMatchingPeriod):
        resolve_period(date(2027, 5, 1), periods)


def test_lookup_exact_cell(package):
    matrix = pricing_matrix_frame(package)
    assert lookup_price(matrix, 0, 1, 2, duration_options=package.duration_options) == Numeric(150.0)


def test_lookup_on_request_is_not_an_error(seasonal_package):
    matrix = pricing_matrix_frame(seasonal_package)
    assert lookup_price(matrix, 1, 0, 2, duration_options=seasonal_package.duration_options) is ON_REQUEST


def test_lookup_without_duration_options(package):
    """A package that offers no durations has no price for any nights."""
    matrix = pricing_matrix_frame(package)
    with pytest.raises(NoPriceForCombination) as exc:
        lookup_price(matrix, 0, 0, 2, duration_options=())
    assert exc.value.context['availableNights'] == []


def test_lookup_nights_not_a_duration_option(package):
    matrix = pricing_matrix_frame(package)
    with pytest.raises(NoPriceForCombination) as exc:
        lookup_price(matrix, 0, 0, 5, duration_options=package.duration_options)
    assert exc.value.context['requestedNights'] == 5
    assert exc.value.context['availableNights'] == [2]


def test_lookup_missing_cell(seasonal_package):
    """Mar has no 3-night price for the 12+ tier."""
    matrix = pricing_matrix_frame(seasonal_package)
    with pytest.raises(NoPriceForCombination):
        lookup_price(matrix, 2, 1, 3, duration_options=seasonal_package.duration_options)


def test_pivot_matrix_shows_tiers_as_columns(seasonal_package):
    wide = pivot_matrix(seasonal_package)
    assert list(wide.columns) == ["period", "nights", "6-11 People", "12+ People"]
    easter = wide[(wide["period"] == "Easter") & (wide["nights"] == 2)].iloc[0]
    assert easter["6-11 People"] == "ON_REQUEST"
    april = wide[(wide["period"] == "April") & (wide["nights"] == 3)].iloc[0]
    assert april["12+ People"] == 169.0
