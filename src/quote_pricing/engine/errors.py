"""
Typed failures of price resolution.

Every failure carries a machine-readable `kind`, a human-readable
message and a context dict, so it can travel over the wire and be
rebuilt on the other side.
"""
from typing import Optional


CONFIGURATION = "configuration"
REFERENCE = "reference"
TRANSPORT = "transport"


class ResolutionError(Exception):
    """Base class for anything that stops a price from being resolved."""

    kind = "ResolutionError"
    category = CONFIGURATION
    is_retryable = False

    def __init__(self, message: str, context: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict:
        return {
            'kind': self.kind,
            'category': self.category,
            'message': self.message,
            'context': self.context,
        }

    @classmethod
    def from_payload(cls, message: str, context: Optional[dict] = None) -> 'ResolutionError':
        """
        Rebuild an error received over the wire.

        Subclass constructors build their message from typed arguments;
        a received error already has its message and context, so they
        are restored as they are.
        """
        error = Exception.__new__(cls)
        ResolutionError.__init__(error, message, context)
        return error


class NoMatchingTier(ResolutionError):
    kind = "NoMatchingTier"

    def __init__(self, people: int, max_people: Optional[int] = None):
        if max_people is not None and people > max_people:
            message = f"{people} people exceeds the maximum tier limit of {max_people}"
        else:
            message = f"No group size tier covers {people} people"
        super().__init__(message, {'requestedPeople': people, 'maxPeople': max_people})


class NoMatchingPeriod(ResolutionError):
    kind = "NoMatchingPeriod"

    def __init__(self, arrival_date, available_periods: list[str]):
        super().__init__(
            f"Date {arrival_date} is outside available pricing periods",
            {'requestedDate': str(arrival_date), 'availablePeriods': list(available_periods)},
        )


class NoPriceForCombination(ResolutionError):
    kind = "NoPriceForCombination"

    def __init__(self, tier_label: str, period: str, nights: int, available_nights: list[int]):
        super().__init__(
            f"No price for {nights} nights in tier '{tier_label}' during '{period}'",
            {
                'tier': tier_label,
                'period': period,
                'requestedNights': nights,
                'availableNights': list(available_nights),
            },
        )


class PackageNotFound(ResolutionError):
    kind = "PackageNotFound"
    category = REFERENCE

    def __init__(self, package_id: str):
        super().__init__(
            f"Package with ID \"{package_id}\" not found or has been deleted",
            {'packageId': package_id},
        )


class PackageVersionChanged(ResolutionError):
    kind = "PackageVersionChanged"
    category = REFERENCE

    def __init__(self, package_id: str, linked_version: int, current_version: int):
        super().__init__(
            f"Package \"{package_id}\" changed since it was linked "
            f"(version {linked_version} → {current_version}); re-link to use the new pricing",
            {'packageId': package_id, 'linkedVersion': linked_version, 'currentVersion': current_version},
        )


class PackageInactive(ResolutionError):
    kind = "PackageInactive"
    category = REFERENCE

    def __init__(self, package_id: str, status: str):
        super().__init__(
            f"The linked package is {status}",
            {'packageId': package_id, 'status': status},
        )


class TransportError(ResolutionError):
    """The resolution call itself failed (network, timeout, bad response)."""
    kind = "TransportError"
    category = TRANSPORT
    is_retryable = True

    def __init__(self, message: str = "Resolution request failed", context: Optional[dict] = None):
        super().__init__(message, context)


ERROR_KINDS = {
    cls.kind: cls
    for cls in (
        NoMatchingTier, NoMatchingPeriod, NoPriceForCombination,
        PackageNotFound, PackageVersionChanged, PackageInactive, TransportError,
    )
}


def error_from_payload(payload: dict) -> ResolutionError:
    """
    Rebuild a typed error from its wire form.

    Accepts either `{"error": {...}}` or the inner dict. Unknown kinds
    become TransportError so the caller still ends up in `error`.
    """
    body = payload.get('error', payload) if isinstance(payload, dict) else {}
    if not isinstance(body, dict):
        body = {'message': str(body)}
    kind = body.get('kind', '')
    message = body.get('message') or 'An unknown error occurred'
    context = body.get('context') or {}

    cls = ERROR_KINDS.get(kind)
    if cls is None or cls is TransportError:
        return TransportError(message, context)
    return cls.from_payload(message, context)
