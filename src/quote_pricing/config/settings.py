"""
Centralized settings and path configuration for quote pricing.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


ENV_PREFIX = "QUOTE_PRICING_"


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def _env(name: str) -> Optional[str]:
    value = os.environ.get(ENV_PREFIX + name)
    return value if value not in (None, '') else None


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes', 'on')


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # JSON package store
    packages_file: Path

    # Price synchronization
    debounce_seconds: float = 0.5
    price_tolerance: float = 0.01
    auto_recalculate: bool = True
    pin_package_version: bool = True

    # Remote resolution collaborator
    resolution_service_url: Optional[str] = None
    request_timeout_seconds: float = 30.0

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()
        default_packages = Path(__file__).resolve().parent.parent / 'data' / 'packages.json'

        return cls(
            project_root=root,
            packages_file=Path(_env('PACKAGES_FILE') or default_packages),
            debounce_seconds=float(_env('DEBOUNCE_SECONDS') or 0.5),
            price_tolerance=float(_env('PRICE_TOLERANCE') or 0.01),
            auto_recalculate=_env_bool('AUTO_RECALCULATE', True),
            pin_package_version=_env_bool('PIN_PACKAGE_VERSION', True),
            resolution_service_url=_env('RESOLUTION_SERVICE_URL'),
            request_timeout_seconds=float(_env('REQUEST_TIMEOUT_SECONDS') or 30.0),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
