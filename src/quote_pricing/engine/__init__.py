"""Engine subpackage - package price resolution."""
from .pricing_engine import PriceResolutionService
from .models import Package, Resolution, ResolutionRequest, Numeric, OnRequest, ON_REQUEST
from .breakdown import present_breakdown

__all__ = [
    'PriceResolutionService', 'Package', 'Resolution', 'ResolutionRequest',
    'Numeric', 'OnRequest', 'ON_REQUEST', 'present_breakdown',
]
