"""Sync subpackage - keeps a quote's price aligned with its package."""
from .state import PricingState, SyncStatus, transition
from .controller import QuotePriceController
from .clients import LocalResolutionClient, HttpResolutionClient, build_client

__all__ = [
    'PricingState', 'SyncStatus', 'transition', 'QuotePriceController',
    'LocalResolutionClient', 'HttpResolutionClient', 'build_client',
]
