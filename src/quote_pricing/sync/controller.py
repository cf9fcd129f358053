"""
Quote Price Controller - owns one quote's pricing state.

The controller is the only writer of `total_price`, the sync status and
the link snapshot. It turns commands into state-machine events, debounces
parameter edits, and runs resolutions through a ResolutionClient.

Concurrency policy: supersede. A newer request replaces the pending one;
the older response is ignored when it arrives (it is never aborted).
"""
import asyncio
import logging
import math
from datetime import date, datetime
from typing import Callable, Optional

from ..config.settings import Settings, get_settings
from ..engine.breakdown import PriceBreakdown, present_breakdown
from ..engine.errors import TransportError
from ..engine.models import ON_REQUEST, ResolutionRequest, parse_date
from .clients import ResolutionClient, describe_error
from .state import (
    HistoryReason,
    LinkRequested,
    ManualPriceSet,
    PARAMETERS,
    ParameterChanged,
    PricingState,
    ResolutionFailed,
    ResolutionRequested,
    ResolutionSucceeded,
    SyncStatus,
    Unlinked,
    transition,
)

logger = logging.getLogger(__name__)


def _positive_int(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return value


def _amount(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative")
    return float(value)


def _normalize_parameter(name: str, value):
    if name not in PARAMETERS:
        raise ValueError(f"Unknown quote parameter: {name}")
    if name == 'arrival_date':
        parsed = parse_date(value)
        if parsed is None:
            raise ValueError("arrival_date is required")
        return parsed
    if name == 'number_of_rooms':
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"number_of_rooms must be a non-negative integer, got {value!r}")
        return value
    if name == 'events_total':
        return _amount(name, value)
    return _positive_int(name, value)


class QuotePriceController:
    """
    Keeps a quote's price aligned with its linked package.

    Commands: link, set_parameter, recalculate, reset_to_calculated,
    unlink, set_manual_price. Read-only views: state, status, breakdown.
    """

    def __init__(
        self,
        client: ResolutionClient,
        *,
        settings: Optional[Settings] = None,
        state: Optional[PricingState] = None,
        debounce_seconds: Optional[float] = None,
        auto_recalculate: Optional[bool] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        settings = settings or get_settings()
        self.client = client
        self.debounce_seconds = settings.debounce_seconds if debounce_seconds is None else debounce_seconds
        self.auto_recalculate = settings.auto_recalculate if auto_recalculate is None else auto_recalculate
        self._clock = clock
        self._state = state or PricingState(price_tolerance=settings.price_tolerance)
        self._debounce_task: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[Callable[[PricingState], None]] = []

    # Read-only views

    @property
    def state(self) -> PricingState:
        return self._state

    @property
    def status(self) -> SyncStatus:
        return self._state.status

    @property
    def breakdown(self) -> Optional[PriceBreakdown]:
        """Per-unit figures, or None while no package is linked."""
        state = self._state
        if not state.is_linked:
            return None
        total = ON_REQUEST if state.awaiting_manual_price else state.total_price
        return present_breakdown(
            total,
            state.number_of_people,
            state.number_of_rooms,
            state.number_of_nights,
            resolution=state.last_resolution,
        )

    def subscribe(self, listener: Callable[[PricingState], None]):
        """Call `listener` with the new state after every transition."""
        self._listeners.append(listener)

    def dispatch(self, event) -> PricingState:
        previous = self._state
        self._state = transition(previous, event)
        if self._state is not previous:
            for listener in self._listeners:
                listener(self._state)
        return self._state

    # Commands

    async def link(
        self,
        package_id: str,
        number_of_people: int,
        number_of_nights: int,
        arrival_date: date | str,
    ) -> PricingState:
        """Link a package and resolve the initial price."""
        people = _positive_int('number_of_people', number_of_people)
        nights = _positive_int('number_of_nights', number_of_nights)
        arrival = _normalize_parameter('arrival_date', arrival_date)

        self._cancel_debounce()
        request_id = self._state.request_seq + 1
        self.dispatch(LinkRequested(
            package_id=package_id,
            request_id=request_id,
            number_of_people=people,
            number_of_nights=nights,
            arrival_date=arrival,
        ))
        await self._run(request_id, ResolutionRequest(package_id, people, nights, arrival))
        return self._state

    def set_parameter(self, name: str, value) -> PricingState:
        """
        Change people, nights, arrival date, rooms or the events total.

        A linked, non-overridden quote goes out-of-sync and an automatic
        recalculation is scheduled after the debounce period.
        """
        self.dispatch(ParameterChanged(name, _normalize_parameter(name, value)))
        if self.auto_recalculate and self._state.needs_auto_recalculation:
            self._schedule_recalculation()
        return self._state

    async def recalculate(self) -> PricingState:
        """Explicitly re-resolve with the current parameters."""
        return await self._explicit(HistoryReason.RECALCULATION)

    async def reset_to_calculated(self) -> PricingState:
        """Drop a manual override and return to the package price."""
        return await self._explicit(HistoryReason.RECALCULATION)

    def set_manual_price(self, price: float) -> PricingState:
        """Record a human-entered total price."""
        return self.dispatch(ManualPriceSet(_amount("Price", price), self._clock()))

    def unlink(self) -> PricingState:
        """Forget the package; every other field is kept as is."""
        self._cancel_debounce()
        return self.dispatch(Unlinked())

    async def wait_idle(self):
        """Wait for the debounce timer and every request to settle."""
        while True:
            pending = list(self._tasks)
            if self._debounce_task is not None and not self._debounce_task.done():
                pending.append(self._debounce_task)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # Internals

    def _current_request(self) -> ResolutionRequest:
        state = self._state
        linked = state.linked_package_info
        return ResolutionRequest(
            package_id=state.package_id,
            number_of_people=state.number_of_people,
            number_of_nights=state.number_of_nights,
            arrival_date=state.arrival_date,
            expected_version=linked.package_version if linked else None,
        )

    async def _explicit(self, reason: HistoryReason) -> PricingState:
        if not self._state.is_linked:
            raise ValueError("No package is linked to this quote")
        if not self._state.is_parameter_valid:
            raise ValueError("People, nights and arrival date are required to calculate a price")
        self._cancel_debounce()
        await self._issue(reason)
        return self._state

    async def _issue(self, reason: HistoryReason):
        request_id = self._state.request_seq + 1
        self.dispatch(ResolutionRequested(request_id, reason))
        await self._run(request_id, self._current_request())

    async def _run(self, request_id: int, request: ResolutionRequest):
        try:
            resolution = await self.client.resolve(request)
        except asyncio.CancelledError:
            # The response will never arrive; don't leave the request pending.
            if request_id == self._state.pending_request_id:
                logger.info("Price resolution %d was cancelled", request_id)
                self.dispatch(ResolutionFailed(
                    request_id, TransportError("Price calculation was cancelled")
                ))
            raise
        except Exception as e:
            error = describe_error(e)
            if request_id != self._state.pending_request_id:
                logger.debug("Ignoring stale failure for request %d: %s", request_id, error.message)
                return
            logger.info("Price resolution failed (%s): %s", error.kind, error.message)
            self.dispatch(ResolutionFailed(request_id, error))
            return

        if request_id != self._state.pending_request_id:
            logger.debug("Ignoring stale result for request %d", request_id)
            return
        self.dispatch(ResolutionSucceeded(request_id, resolution, self._clock()))

    def _schedule_recalculation(self):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; waiting for an explicit recalculate")
            return
        self._cancel_debounce()
        self._debounce_task = loop.create_task(self._debounced())

    async def _debounced(self):
        await asyncio.sleep(self.debounce_seconds)
        if not self._state.needs_auto_recalculation:
            return
        task = asyncio.create_task(self._issue(HistoryReason.RECALCULATION))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _cancel_debounce(self):
        # Only the quiet-period timer is cancelled; requests already
        # issued run to completion and are ignored if superseded.
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None
