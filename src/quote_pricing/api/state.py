"""
Shared service instances for the API.
"""
from ..config.settings import get_settings
from ..engine.pricing_engine import PriceResolutionService
from ..services.package_service import PackageService

settings = get_settings()
package_service = PackageService(settings.packages_file)
resolution_service = PriceResolutionService(
    package_service,
    pin_package_version=settings.pin_package_version,
)
