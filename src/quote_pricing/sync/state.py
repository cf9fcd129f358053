"""
Price synchronization state machine.

A quote's pricing fields live in one frozen PricingState. Every change
goes through `transition(state, event) -> state`, a pure function with
no I/O, so the machine can be tested without mocking anything.

Stale results are dropped with a generation counter: each resolution
request gets the next `request_seq`, and a result is applied only when
its id is still the `pending_request_id`.
"""
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from ..engine.errors import ResolutionError
from ..engine.models import LinkedPackageInfo, Numeric, OnRequest, Price, Resolution


DEFAULT_TOLERANCE = 0.01

PRICE_PARAMETERS = ('number_of_people', 'number_of_nights', 'arrival_date')
PARAMETERS = PRICE_PARAMETERS + ('number_of_rooms', 'events_total')


class SyncStatus(str, Enum):
    SYNCED = 'synced'
    CALCULATING = 'calculating'
    CUSTOM = 'custom'
    ERROR = 'error'
    OUT_OF_SYNC = 'out-of-sync'


class HistoryReason(str, Enum):
    PACKAGE_SELECTION = 'package_selection'
    RECALCULATION = 'recalculation'
    MANUAL_OVERRIDE = 'manual_override'


@dataclass(frozen=True)
class PriceHistoryEntry:
    price: float
    reason: HistoryReason
    timestamp: datetime


@dataclass(frozen=True)
class PricingState:
    """Everything the state machine owns for one quote."""
    number_of_people: int = 0
    number_of_nights: int = 0
    arrival_date: Optional[date] = None
    number_of_rooms: int = 0
    # Add-ons (events) priced outside the package; part of total_price.
    events_total: float = 0.0
    total_price: float = 0.0

    package_id: Optional[str] = None
    linked_package_info: Optional[LinkedPackageInfo] = None
    status: SyncStatus = SyncStatus.SYNCED
    last_resolution: Optional[Resolution] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    # Set by a manual price edit; blocks automatic recomputation.
    manual_override: bool = False
    # Set by an ON_REQUEST resolution until a human enters a price.
    awaiting_manual_price: bool = False

    request_seq: int = 0
    pending_request_id: Optional[int] = None
    pending_reason: Optional[HistoryReason] = None

    price_history: tuple[PriceHistoryEntry, ...] = ()
    price_tolerance: float = DEFAULT_TOLERANCE

    @property
    def is_linked(self) -> bool:
        return self.package_id is not None

    @property
    def last_resolved_price(self) -> Optional[Price]:
        return self.last_resolution.price if self.last_resolution else None

    @property
    def calculated_total(self) -> Optional[float]:
        """Package price plus events, or None without a numeric resolution."""
        resolved = self.last_resolved_price
        if not isinstance(resolved, Numeric):
            return None
        return resolved.amount + self.events_total

    @property
    def is_parameter_valid(self) -> bool:
        return (
            self.number_of_people > 0
            and self.number_of_nights > 0
            and self.arrival_date is not None
        )

    @property
    def needs_auto_recalculation(self) -> bool:
        """Linked, stale, not overridden and nothing in flight."""
        return (
            self.is_linked
            and self.status == SyncStatus.OUT_OF_SYNC
            and not self.manual_override
            and self.pending_request_id is None
            and self.is_parameter_valid
        )


# Events

@dataclass(frozen=True)
class LinkRequested:
    package_id: str
    request_id: int
    number_of_people: int
    number_of_nights: int
    arrival_date: date


@dataclass(frozen=True)
class ParameterChanged:
    name: str
    value: Union[int, float, date, None]


@dataclass(frozen=True)
class ResolutionRequested:
    request_id: int
    reason: HistoryReason = HistoryReason.RECALCULATION


@dataclass(frozen=True)
class ResolutionSucceeded:
    request_id: int
    resolution: Resolution
    timestamp: datetime


@dataclass(frozen=True)
class ResolutionFailed:
    request_id: int
    error: ResolutionError


@dataclass(frozen=True)
class ManualPriceSet:
    price: float
    timestamp: datetime


@dataclass(frozen=True)
class Unlinked:
    pass


Event = Union[
    LinkRequested, ParameterChanged, ResolutionRequested, ResolutionSucceeded,
    ResolutionFailed, ManualPriceSet, Unlinked,
]


def _record(state: PricingState, price: float, reason: HistoryReason, timestamp: datetime) -> tuple:
    return state.price_history + (PriceHistoryEntry(price=price, reason=reason, timestamp=timestamp),)


def _on_link(state: PricingState, event: LinkRequested) -> PricingState:
    if event.request_id <= state.request_seq:
        raise ValueError(f"Request id {event.request_id} was already issued")
    return replace(
        state,
        number_of_people=event.number_of_people,
        number_of_nights=event.number_of_nights,
        arrival_date=event.arrival_date,
        package_id=event.package_id,
        linked_package_info=None,
        last_resolution=None,
        status=SyncStatus.CALCULATING,
        error=None,
        error_kind=None,
        manual_override=False,
        awaiting_manual_price=False,
        request_seq=event.request_id,
        pending_request_id=event.request_id,
        pending_reason=HistoryReason.PACKAGE_SELECTION,
    )


def _on_parameter(state: PricingState, event: ParameterChanged) -> PricingState:
    if event.name not in PARAMETERS:
        raise ValueError(f"Unknown quote parameter: {event.name}")
    if getattr(state, event.name) == event.value:
        return state

    state = replace(state, **{event.name: event.value})
    if event.name == 'events_total':
        # Events sit on top of the package price; no resolution needed.
        synced = state.is_linked and state.status == SyncStatus.SYNCED and not state.manual_override
        if synced and state.calculated_total is not None:
            return replace(state, total_price=state.calculated_total)
        return state
    if event.name not in PRICE_PARAMETERS or not state.is_linked:
        return state

    if state.manual_override:
        # The price is the user's, not derived from the parameters.
        return state

    # Anything in flight was computed for the old parameters.
    return replace(
        state,
        status=SyncStatus.OUT_OF_SYNC,
        pending_request_id=None,
        pending_reason=None,
    )


def _on_request(state: PricingState, event: ResolutionRequested) -> PricingState:
    if not state.is_linked:
        return state
    if event.request_id <= state.request_seq:
        raise ValueError(f"Request id {event.request_id} was already issued")
    return replace(
        state,
        status=SyncStatus.CALCULATING,
        error=None,
        error_kind=None,
        manual_override=False,
        request_seq=event.request_id,
        pending_request_id=event.request_id,
        pending_reason=event.reason,
    )


def _on_success(state: PricingState, event: ResolutionSucceeded) -> PricingState:
    if event.request_id != state.pending_request_id:
        return state

    resolution = event.resolution
    reason = state.pending_reason or HistoryReason.RECALCULATION
    state = replace(
        state,
        last_resolution=resolution,
        linked_package_info=state.linked_package_info or LinkedPackageInfo.from_resolution(resolution),
        pending_request_id=None,
        pending_reason=None,
        error=None,
        error_kind=None,
    )

    if isinstance(resolution.price, OnRequest):
        return replace(state, status=SyncStatus.CUSTOM, awaiting_manual_price=True)

    total = resolution.price.amount + state.events_total
    return replace(
        state,
        total_price=total,
        status=SyncStatus.SYNCED,
        awaiting_manual_price=False,
        price_history=_record(state, total, reason, event.timestamp),
    )


def _on_failure(state: PricingState, event: ResolutionFailed) -> PricingState:
    if event.request_id != state.pending_request_id:
        return state
    return replace(
        state,
        status=SyncStatus.ERROR,
        error=event.error.message,
        error_kind=event.error.kind,
        pending_request_id=None,
        pending_reason=None,
    )


def _on_manual_price(state: PricingState, event: ManualPriceSet) -> PricingState:
    if not state.is_linked:
        return replace(state, total_price=event.price)

    calculated = state.calculated_total
    if calculated is not None and abs(event.price - calculated) <= state.price_tolerance:
        return replace(state, total_price=event.price)

    return replace(
        state,
        total_price=event.price,
        status=SyncStatus.CUSTOM,
        manual_override=True,
        awaiting_manual_price=False,
        pending_request_id=None,
        pending_reason=None,
        price_history=_record(state, event.price, HistoryReason.MANUAL_OVERRIDE, event.timestamp),
    )


def _on_unlink(state: PricingState, event: Unlinked) -> PricingState:
    return replace(
        state,
        package_id=None,
        linked_package_info=None,
        last_resolution=None,
        status=SyncStatus.SYNCED,
        error=None,
        error_kind=None,
        manual_override=False,
        awaiting_manual_price=False,
        pending_request_id=None,
        pending_reason=None,
    )


_HANDLERS = {
    LinkRequested: _on_link,
    ParameterChanged: _on_parameter,
    ResolutionRequested: _on_request,
    ResolutionSucceeded: _on_success,
    ResolutionFailed: _on_failure,
    ManualPriceSet: _on_manual_price,
    Unlinked: _on_unlink,
}


def transition(state: PricingState, event: Event) -> PricingState:
    """Apply one event to the pricing state and return the new state."""
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unsupported event: {event!r}")
    return handler(state, event)
