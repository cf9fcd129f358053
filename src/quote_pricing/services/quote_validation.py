"""
Quote Validation - checks a quote's pricing before it is submitted.
"""
import math
from datetime import date
from typing import Optional

from ..sync.state import PricingState, SyncStatus
from .package_service import ValidationResult


def validate_quote_submission(state: PricingState, today: Optional[date] = None) -> ValidationResult:
    """
    Validate the pricing part of a quote create/update.

    A price that came from an ON_REQUEST resolution without a human
    entering a number afterwards is rejected.
    """
    today = today or date.today()
    result = ValidationResult(valid=True)

    if state.number_of_people < 1:
        result.add_error("Number of people must be at least 1")
    if state.number_of_nights < 1:
        result.add_error("Number of nights must be at least 1")

    if state.arrival_date is None:
        result.add_error("Arrival date is required")
    elif state.arrival_date <= today:
        result.add_error("Arrival date must be in the future")

    if state.awaiting_manual_price:
        result.add_error("Package price is ON REQUEST; enter the price manually before saving")
    elif not math.isfinite(state.total_price) or state.total_price <= 0:
        result.add_error("Total price must be a number greater than zero")

    if state.is_linked:
        if state.status == SyncStatus.OUT_OF_SYNC:
            result.add_warning("Price may not reflect the current people, nights or arrival date")
        elif state.status == SyncStatus.CALCULATING:
            result.add_warning("Price calculation is still in progress")
        elif state.status == SyncStatus.ERROR:
            result.add_warning(f"Package price could not be calculated: {state.error}")

    return result
