from datetime import date, timedelta

import pytest

from quote_pricing.engine.errors import (
    NoMatchingPeriod, NoMatchingTier, NoPriceForCombination,
    PackageInactive, PackageNotFound, PackageVersionChanged, error_from_payload,
)
from quote_pricing.engine.models import ON_REQUEST, Numeric, ResolutionRequest
from quote_pricing.engine.pricing_engine import PriceResolutionService

from conftest import JANUARY_DATE, make_package


def test_small_group_january(service, package):
    result = service.resolve(package, 2, 2, JANUARY_DATE)
    assert result.price == Numeric(100.0)
    assert result.tier_label == "Small"
    assert result.tier_index == 0
    assert result.period == "January"
    assert result.currency == "GBP"


def test_medium_group_january(service, package):
    result = service.resolve(package, 5, 2, JANUARY_DATE)
    assert result.price == Numeric(150.0)
    assert result.tier_label == "Medium"


def test_nights_not_offered(service, package):
    with pytest.raises(NoPriceForCombination):
        service.resolve(package, 5, 5, JANUARY_DATE)


def test_errors_propagate_unchanged(service, package):
    with pytest.raises(NoMatchingTier):
        service.resolve(package, 12, 2, JANUARY_DATE)
    with pytest.raises(NoMatchingPeriod):
        service.resolve(package, 2, 2, date(2027, 6, 1))


def test_resolution_is_idempotent(service, package):
    """Every day of January, twice, gives identical answers."""
    for offset in range(31):
        day = date(2027, 1, 1) + timedelta(days=offset)
        first = service.resolve(package, 3, 2, day)
        second = service.resolve(package, 3, 2, day)
        assert first == second
        assert first.trace == second.trace


def test_on_request_resolution(service, seasonal_package):
    result = service.resolve(seasonal_package, 8, 2, date(2027, 3, 26))
    assert result.price is ON_REQUEST
    assert result.is_on_request
    assert result.period == "Easter"


def test_trace_describes_each_stage(service, package):
    result = service.resolve(package, 2, 2, JANUARY_DATE)
    steps = [t.step for t in result.trace]
    assert steps == ["Package", "Tier", "Period", "Price"]
    assert "Small" in result.get_trace_text()


def test_resolve_request_by_id(service):
    request = ResolutionRequest("pkg-jan", 2, 2, JANUARY_DATE)
    assert service.resolve_request(request).price == Numeric(100.0)


def test_resolve_request_unknown_package(service):
    with pytest.raises(PackageNotFound):
        service.resolve_request(ResolutionRequest("missing", 2, 2, JANUARY_DATE))


def test_resolve_request_deleted_package(package_service, service):
    package_service.delete_package("pkg-jan")
    with pytest.raises(PackageNotFound):
        service.resolve_request(ResolutionRequest("pkg-jan", 2, 2, JANUARY_DATE))


def test_resolve_request_inactive_package(package_service):
    package_service.save_package(make_package(status="inactive"))
    service = PriceResolutionService(package_service)
    with pytest.raises(PackageInactive):
        service.resolve_request(ResolutionRequest("pkg-jan", 2, 2, JANUARY_DATE))


def test_resolve_request_version_changed(service):
    request = ResolutionRequest("pkg-jan", 2, 2, JANUARY_DATE, expected_version=3)
    with pytest.raises(PackageVersionChanged) as exc:
        service.resolve_request(request)
    assert exc.value.context == {'packageId': 'pkg-jan', 'linkedVersion': 3, 'currentVersion': 1}


def test_version_not_pinned(package_service):
    service = PriceResolutionService(package_service, pin_package_version=False)
    request = ResolutionRequest("pkg-jan", 2, 2, JANUARY_DATE, expected_version=3)
    assert service.resolve_request(request).package_version == 1


def test_resolution_wire_round_trip(service, package):
    result = service.resolve(package, 5, 2, JANUARY_DATE)
    wire = result.to_wire()
    assert wire['price'] == 150.0
    assert wire['tier'] == {'label': 'Medium', 'index': 1}
    assert wire['period'] == {'label': 'January'}
    assert wire['currency'] == 'GBP'


def test_error_wire_round_trip():
    original = PackageVersionChanged("pkg-jan", 1, 2)
    rebuilt = error_from_payload({"error": original.to_dict()})
    assert type(rebuilt) is PackageVersionChanged
    assert rebuilt.message == original.message
    assert rebuilt.context == {'packageId': 'pkg-jan', 'linkedVersion': 1, 'currentVersion': 2}
    assert str(rebuilt) == original.message


def test_error_from_payload_keeps_received_message():
    rebuilt = NoMatchingTier.from_payload("Too many travellers", {'requestedPeople': 9})
    assert isinstance(rebuilt, NoMatchingTier)
    assert rebuilt.message == "Too many travellers"
    assert rebuilt.context['requestedPeople'] == 9
    assert rebuilt.category == "configuration"
