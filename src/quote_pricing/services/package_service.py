"""
Package Service - storage and validation for pricing packages.

Handles reading/writing packages.json. This is the narrow persistence
interface the resolution service consumes; any other store only has
to provide `get_package`.
"""
import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from ..engine.models import Numeric, Package, PACKAGE_STATUSES
from ..engine.period_resolver import month_number

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of package or quote validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, message: str):
        self.errors.append(message)
        self.valid = False

    def add_warning(self, message: str):
        self.warnings.append(message)


class PackageService:
    """Service for managing pricing packages."""

    def __init__(self, packages_path: Optional[Path] = None):
        self.packages_path = packages_path
        self._packages: dict[str, Package] = {}
        if packages_path and packages_path.exists():
            self._load(packages_path)

    @classmethod
    def from_packages(cls, packages: list[Package]) -> 'PackageService':
        """In-memory service, nothing is written to disk."""
        service = cls()
        for package in packages:
            service._packages[package.package_id] = package
        return service

    def _load(self, path: Path):
        """Load packages from JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        for raw in data.get('packages', []):
            package = Package.from_dict(raw)
            self._packages[package.package_id] = package
        logger.info("Loaded %d packages from %s", len(self._packages), path)

    def _write(self):
        """Write packages back to JSON."""
        if not self.packages_path:
            return
        payload = {'packages': [p.to_dict() for p in self._packages.values()]}
        with open(self.packages_path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2)

    def list_packages(self, include_inactive: bool = True) -> list[Package]:
        """List packages, never including deleted ones."""
        packages = [p for p in self._packages.values() if p.status != 'deleted']
        if not include_inactive:
            packages = [p for p in packages if p.status == 'active']
        return packages

    def get_package(self, package_id: str) -> Optional[Package]:
        """Get a single package by ID (deleted packages included)."""
        return self._packages.get(package_id)

    def save_package(self, package: Package) -> Package:
        """
        Create or update a package.

        The version is bumped whenever the pricing table changes, so
        quotes linked to the old version can detect the edit.
        """
        validation = self.validate_package(package)
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))

        existing = self._packages.get(package.package_id)
        if existing is None:
            saved = package
        elif existing.pricing_signature() != package.pricing_signature():
            saved = replace(package, version=existing.version + 1)
        else:
            saved = replace(package, version=existing.version)

        self._packages[saved.package_id] = saved
        self._write()
        return saved

    def delete_package(self, package_id: str) -> Package:
        """Soft delete a package; linked quotes then see PackageNotFound."""
        existing = self._packages.get(package_id)
        if existing is None or existing.status == 'deleted':
            raise ValueError(f"Package with ID '{package_id}' not found")
        deleted = replace(existing, status='deleted')
        self._packages[package_id] = deleted
        self._write()
        return deleted

    def validate_package(self, package: Package) -> ValidationResult:
        """Validate a package's pricing table before saving."""
        result = ValidationResult(valid=True)

        if not package.name:
            result.add_error("Name is required")

        if package.status not in PACKAGE_STATUSES:
            result.add_error(f"Status must be one of: {', '.join(PACKAGE_STATUSES)}")

        tiers = package.group_size_tiers
        if not tiers:
            result.add_error("At least one group size tier is required")
        for tier in tiers:
            if tier.min_people < 1:
                result.add_error(f"Tier '{tier.label}' must start at 1 person or more")
            if tier.min_people > tier.max_people:
                result.add_error(f"Tier '{tier.label}': minPeople must not exceed maxPeople")

        # Overlaps and gaps, checked on the declared order
        for index in range(1, len(tiers)):
            previous, current = tiers[index - 1], tiers[index]
            for other in tiers[:index]:
                if current.min_people <= other.max_people and other.min_people <= current.max_people:
                    result.add_warning(
                        f"Tier '{current.label}' overlaps '{other.label}'; '{other.label}' wins for shared counts"
                    )
            if current.min_people > previous.max_people + 1:
                result.add_warning(
                    f"No tier covers {previous.max_people + 1}-{current.min_people - 1} people"
                )

        if not package.duration_options:
            result.add_error("At least one duration option is required")
        if any(n <= 0 for n in package.duration_options):
            result.add_error("Duration options must be positive")

        if not package.pricing_matrix:
            result.add_error("At least one pricing entry is required")

        for entry in package.pricing_matrix:
            if entry.period_type == 'special':
                if entry.start_date is None or entry.end_date is None:
                    result.add_error(f"Special period '{entry.period}' needs a start and end date")
                elif entry.start_date > entry.end_date:
                    result.add_error(f"Special period '{entry.period}': start date must be before end date")
            elif entry.period_type == 'month':
                if month_number(entry.period) is None:
                    result.add_error(f"Period '{entry.period}' is not a month name")
            else:
                result.add_error(f"Period '{entry.period}' has unknown type '{entry.period_type}'")

            if not entry.prices:
                result.add_error(f"Period '{entry.period}' has no price points")

            seen = set()
            for point in entry.prices:
                if not 0 <= point.tier_index < len(tiers):
                    result.add_error(f"Period '{entry.period}' references unknown tier {point.tier_index}")
                if point.nights not in package.duration_options:
                    result.add_error(
                        f"Period '{entry.period}' prices {point.nights} nights, which is not a duration option"
                    )
                if isinstance(point.price, Numeric) and point.price.amount < 0:
                    result.add_error(f"Period '{entry.period}' has a negative price")
                seen.add((point.tier_index, point.nights))

            missing = [
                (t, n)
                for t in range(len(tiers))
                for n in package.duration_options
                if (t, n) not in seen
            ]
            if entry.prices and missing:
                result.add_warning(f"Period '{entry.period}' is missing {len(missing)} tier/nights prices")

        return result
