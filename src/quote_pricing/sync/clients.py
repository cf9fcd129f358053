"""
Resolution clients - the remote computation collaborator.

The controller only sees `ResolutionClient.resolve`. The local client
runs the resolution service in-process; the HTTP client talks to the
API's `/api/packages/{id}/resolve` endpoint.
"""
import asyncio
import logging
from typing import Optional, Protocol

import httpx

from ..engine.errors import ResolutionError, TransportError, error_from_payload
from ..engine.models import Resolution, ResolutionRequest
from ..engine.pricing_engine import PriceResolutionService
from ..services.package_service import PackageService

logger = logging.getLogger(__name__)


class ResolutionClient(Protocol):
    async def resolve(self, request: ResolutionRequest) -> Resolution:
        ...


class LocalResolutionClient:
    """Runs resolution in a worker thread so the event loop stays free."""

    def __init__(self, service: PriceResolutionService):
        self.service = service

    async def resolve(self, request: ResolutionRequest) -> Resolution:
        return await asyncio.to_thread(self.service.resolve_request, request)


class HttpResolutionClient:
    """
    Calls a remote resolution service over HTTP.

    Structured error bodies are rebuilt into typed errors; anything
    httpx raises becomes a TransportError.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout_seconds = timeout_seconds
        self._client = client

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout_seconds),
            headers={'Accept': 'application/json'},
        )

    async def resolve(self, request: ResolutionRequest) -> Resolution:
        path = f"/api/packages/{request.package_id}/resolve"
        try:
            if self._client is not None:
                response = await self._client.post(path, json=request.to_wire())
            else:
                async with self._build_client() as client:
                    response = await client.post(path, json=request.to_wire())
        except httpx.TimeoutException as e:
            logger.warning("Resolution request timed out: %s", e)
            raise TransportError(
                f"Price calculation timed out after {self.timeout_seconds}s",
                {'timeoutSeconds': self.timeout_seconds},
            ) from e
        except httpx.HTTPError as e:
            logger.warning("Resolution request failed: %s", e)
            raise TransportError("Unable to reach the pricing service") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid response from pricing service (HTTP {response.status_code})"
            ) from e

        if response.status_code >= 400:
            raise error_from_payload(payload)

        try:
            return Resolution.from_wire(payload, request)
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed resolution response: {e}") from e


def describe_error(error: Exception) -> ResolutionError:
    """Make sure whatever a client raised is a ResolutionError."""
    if isinstance(error, ResolutionError):
        return error
    return TransportError(str(error) or type(error).__name__)


def build_client(settings, service: Optional[PriceResolutionService] = None) -> ResolutionClient:
    """
    Pick the resolution client for the given settings.

    A configured `resolution_service_url` means the HTTP client;
    otherwise resolution runs in-process against the package store.
    """
    if settings.resolution_service_url:
        return HttpResolutionClient(
            settings.resolution_service_url,
            timeout_seconds=settings.request_timeout_seconds,
        )
    if service is None:
        service = PriceResolutionService(
            PackageService(settings.packages_file),
            pin_package_version=settings.pin_package_version,
        )
    return LocalResolutionClient(service)
