"""
Data models for the package pricing engine.

Uses dataclasses for structured, type-safe data representation.
Prices are a small sum type (Numeric | OnRequest) so every consumer
has to branch before doing arithmetic on a price.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Union


ON_REQUEST_LABEL = "ON_REQUEST"


@dataclass(frozen=True)
class Numeric:
    """A fixed price amount."""
    amount: float


@dataclass(frozen=True)
class OnRequest:
    """No fixed price; must be quoted manually."""

    def __str__(self) -> str:
        return ON_REQUEST_LABEL


ON_REQUEST = OnRequest()

Price = Union[Numeric, OnRequest]


def parse_price(value) -> Price:
    """Build a Price from its wire form (a number or "ON_REQUEST")."""
    if isinstance(value, (Numeric, OnRequest)):
        return value
    if isinstance(value, str):
        if value.strip().upper() == ON_REQUEST_LABEL:
            return ON_REQUEST
        return Numeric(float(value))
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid price value: {value!r}")
    return Numeric(float(value))


def price_to_wire(price: Price) -> float | str:
    """Convert a Price to its wire form."""
    if isinstance(price, OnRequest):
        return ON_REQUEST_LABEL
    return price.amount


def parse_date(value) -> Optional[date]:
    """Parse an ISO date (or datetime) into a date."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass(frozen=True)
class GroupSizeTier:
    """A people-count bracket with inclusive bounds."""
    label: str
    min_people: int
    max_people: int

    def contains(self, people: int) -> bool:
        return self.min_people <= people <= self.max_people


@dataclass(frozen=True)
class PricePoint:
    """One cell of the pricing matrix."""
    tier_index: int
    nights: int
    price: Price


@dataclass(frozen=True)
class PeriodEntry:
    """
    A named pricing window and its price points.

    `month` periods are matched by month name, `special` periods by
    their inclusive start/end dates.
    """
    period: str
    prices: tuple[PricePoint, ...] = ()
    period_type: str = "month"
    start_date: Optional[date] = None
    end_date: Optional[date] = None


PACKAGE_STATUSES = ('active', 'inactive', 'deleted')


@dataclass(frozen=True)
class Package:
    """A reusable package with tiered, period-based pricing."""
    package_id: str
    name: str
    currency: str
    group_size_tiers: tuple[GroupSizeTier, ...]
    duration_options: tuple[int, ...]
    pricing_matrix: tuple[PeriodEntry, ...]
    version: int = 1
    status: str = "active"
    destination: str = ""
    resort: str = ""

    def pricing_signature(self) -> tuple:
        """Everything that affects a resolved price."""
        return (self.currency, self.group_size_tiers, self.duration_options, self.pricing_matrix)

    @classmethod
    def from_dict(cls, data: dict) -> 'Package':
        """Create a Package from its stored JSON form."""
        tiers = tuple(
            GroupSizeTier(
                label=str(t.get('label', '')),
                min_people=int(t['minPeople']),
                max_people=int(t['maxPeople']),
            )
            for t in data.get('groupSizeTiers', [])
        )
        periods = []
        for entry in data.get('pricingMatrix', []):
            points = tuple(
                PricePoint(
                    tier_index=int(p['groupSizeTierIndex']),
                    nights=int(p['nights']),
                    price=parse_price(p['price']),
                )
                for p in entry.get('prices', [])
            )
            periods.append(PeriodEntry(
                period=str(entry['period']).strip(),
                prices=points,
                period_type=entry.get('periodType', 'month'),
                start_date=parse_date(entry.get('startDate')),
                end_date=parse_date(entry.get('endDate')),
            ))
        return cls(
            package_id=str(data['id']),
            name=data.get('name', ''),
            currency=data.get('currency', 'EUR'),
            group_size_tiers=tiers,
            duration_options=tuple(int(n) for n in data.get('durationOptions', [])),
            pricing_matrix=tuple(periods),
            version=int(data.get('version', 1)),
            status=data.get('status', 'active'),
            destination=data.get('destination', ''),
            resort=data.get('resort', ''),
        )

    def to_dict(self) -> dict:
        """Convert to the stored JSON form."""
        return {
            'id': self.package_id,
            'name': self.name,
            'destination': self.destination,
            'resort': self.resort,
            'currency': self.currency,
            'version': self.version,
            'status': self.status,
            'groupSizeTiers': [
                {'label': t.label, 'minPeople': t.min_people, 'maxPeople': t.max_people}
                for t in self.group_size_tiers
            ],
            'durationOptions': list(self.duration_options),
            'pricingMatrix': [
                {
                    'period': e.period,
                    'periodType': e.period_type,
                    'startDate': e.start_date.isoformat() if e.start_date else None,
                    'endDate': e.end_date.isoformat() if e.end_date else None,
                    'prices': [
                        {
                            'groupSizeTierIndex': p.tier_index,
                            'nights': p.nights,
                            'price': price_to_wire(p.price),
                        }
                        for p in e.prices
                    ],
                }
                for e in self.pricing_matrix
            ],
        }


@dataclass(frozen=True)
class TraceStep:
    """A single step in the price resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class ResolutionRequest:
    """Parameters of one resolution call (the remote contract request)."""
    package_id: str
    number_of_people: int
    number_of_nights: int
    arrival_date: date
    expected_version: Optional[int] = None

    def to_wire(self) -> dict:
        payload = {
            'numberOfPeople': self.number_of_people,
            'numberOfNights': self.number_of_nights,
            'arrivalDate': self.arrival_date.isoformat(),
        }
        if self.expected_version is not None:
            payload['expectedVersion'] = self.expected_version
        return payload


@dataclass(frozen=True)
class Resolution:
    """Complete result of a price resolution."""
    package_id: str
    package_name: str
    package_version: int
    currency: str
    price: Price
    tier_index: int
    tier_label: str
    period: str
    number_of_people: int
    number_of_nights: int
    arrival_date: date
    trace: tuple[TraceStep, ...] = field(default=(), compare=False)

    @property
    def is_on_request(self) -> bool:
        return isinstance(self.price, OnRequest)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)

    def to_wire(self) -> dict:
        """Response body of the resolution contract."""
        return {
            'price': price_to_wire(self.price),
            'tier': {'label': self.tier_label, 'index': self.tier_index},
            'period': {'label': self.period},
            'currency': self.currency,
            'packageId': self.package_id,
            'packageName': self.package_name,
            'packageVersion': self.package_version,
            'numberOfPeople': self.number_of_people,
            'numberOfNights': self.number_of_nights,
            'arrivalDate': self.arrival_date.isoformat(),
            'trace': [
                {'step': t.step, 'description': t.description, 'value': t.value}
                for t in self.trace
            ],
        }

    @classmethod
    def from_wire(cls, data: dict, request: ResolutionRequest) -> 'Resolution':
        """Rebuild a Resolution from a contract response."""
        return cls(
            package_id=str(data.get('packageId', request.package_id)),
            package_name=data.get('packageName', ''),
            package_version=int(data.get('packageVersion', request.expected_version or 1)),
            currency=data['currency'],
            price=parse_price(data['price']),
            tier_index=int(data['tier']['index']),
            tier_label=data['tier']['label'],
            period=data['period']['label'],
            number_of_people=int(data.get('numberOfPeople', request.number_of_people)),
            number_of_nights=int(data.get('numberOfNights', request.number_of_nights)),
            arrival_date=parse_date(data.get('arrivalDate')) or request.arrival_date,
            trace=tuple(
                TraceStep(step=t['step'], description=t['description'], value=t.get('value'))
                for t in data.get('trace', [])
            ),
        )


@dataclass(frozen=True)
class LinkedPackageInfo:
    """
    Immutable snapshot captured when a quote is linked to a package.

    It records which package/tier/period produced the quote's price at
    link time and never changes when the package itself is edited.
    """
    package_id: str
    package_name: str
    package_version: int
    tier_index: int
    tier_label: str
    selected_nights: int
    selected_period: str
    calculated_price: Price
    currency: str = ""

    @property
    def price_was_on_request(self) -> bool:
        return isinstance(self.calculated_price, OnRequest)

    @classmethod
    def from_resolution(cls, resolution: Resolution) -> 'LinkedPackageInfo':
        return cls(
            package_id=resolution.package_id,
            package_name=resolution.package_name,
            package_version=resolution.package_version,
            tier_index=resolution.tier_index,
            tier_label=resolution.tier_label,
            selected_nights=resolution.number_of_nights,
            selected_period=resolution.period,
            calculated_price=resolution.price,
            currency=resolution.currency,
        )

    def to_wire(self) -> dict:
        """The link snapshot as persisted with a quote."""
        return {
            'packageId': self.package_id,
            'packageName': self.package_name,
            'packageVersion': self.package_version,
            'selectedTier': {'tierIndex': self.tier_index, 'tierLabel': self.tier_label},
            'selectedNights': self.selected_nights,
            'selectedPeriod': self.selected_period,
            'calculatedPrice': price_to_wire(self.calculated_price),
            'priceWasOnRequest': self.price_was_on_request,
        }
