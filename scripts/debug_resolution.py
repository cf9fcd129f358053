import argparse
import logging
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from quote_pricing.config.settings import get_settings
from quote_pricing.engine.breakdown import present_breakdown
from quote_pricing.engine.errors import ResolutionError
from quote_pricing.engine.models import ResolutionRequest, parse_date
from quote_pricing.engine.price_lookup import pivot_matrix
from quote_pricing.engine.pricing_engine import PriceResolutionService
from quote_pricing.services.package_service import PackageService


def debug():
    parser = argparse.ArgumentParser(description="Resolve one package price and print the trace")
    parser.add_argument("package_id")
    parser.add_argument("people", type=int)
    parser.add_argument("nights", type=int)
    parser.add_argument("arrival_date")
    parser.add_argument("--rooms", type=int, default=0)
    parser.add_argument("--matrix", action="store_true", help="print the pricing matrix first")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    settings = get_settings()
    packages = PackageService(settings.packages_file)
    service = PriceResolutionService(packages)

    package = packages.get_package(args.package_id)
    if args.matrix and package is not None:
        print(f"Pricing matrix for {package.name} ({package.currency}):")
        print(pivot_matrix(package).to_string(index=False))
        print()

    request = ResolutionRequest(args.package_id, args.people, args.nights, parse_date(args.arrival_date))
    try:
        resolution = service.resolve_request(request)
    except ResolutionError as e:
        print(f"{e.kind}: {e.message}")
        print(f"Context: {e.context}")
        sys.exit(1)

    print(resolution.get_trace_text())

    breakdown = present_breakdown(resolution.price, args.people, args.rooms, args.nights, resolution=resolution)
    print("\nBreakdown:")
    print(f"  Per person: {breakdown.per_person}")
    print(f"  Per room:   {breakdown.per_room}")
    print(f"  Per night:  {breakdown.per_night}")

if __name__ == "__main__":
    debug()
