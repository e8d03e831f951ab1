from abc import ABC, abstractmethod
from http import HTTPStatus
from typing import Any

import httpx

from meshlocator.models.common import FetchResult, FetchStatus


class BaseJSONClient(ABC):
    """Shared plumbing for outbound JSON-over-HTTP calls.

    Concrete clients never raise for transport or payload problems; they
    return a FetchResult describing the outcome so callers can choose how to
    degrade.
    """

    def __init__(self, timeout_seconds: float) -> None:
        self._timeout_seconds = timeout_seconds

    async def _request(self, url: str, params: dict[str, Any] | None = None) -> FetchResult:
        """Perform one GET request and classify the outcome."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                response = await client.get(url, params=params)
        except httpx.RequestError as exc:
            return FetchResult.failure(FetchStatus.transport_error, repr(exc))

        status_code = response.status_code
        if not HTTPStatus.OK <= status_code < HTTPStatus.MULTIPLE_CHOICES:
            return FetchResult.failure(FetchStatus.http_error, f"HTTP {status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            return FetchResult.failure(FetchStatus.malformed_payload, f"Invalid JSON: {exc}")

        if not isinstance(data, dict):
            detail = f"Expected a JSON object, got {type(data).__name__}"
            return FetchResult.failure(FetchStatus.malformed_payload, detail)

        return self._normalize_payload(data)

    def _normalize_payload(self, data: dict[str, Any]) -> FetchResult:
        """Map a decoded JSON object to the result handed to callers."""
        return FetchResult.success(data)


class BaseReverseGeocoder(BaseJSONClient):
    """Abstract base for reverse geocoding providers.

    Implementations return, on success, a payload holding the provider's
    address components for the given point.
    """

    @abstractmethod
    async def reverse(self, lat: float, lon: float) -> FetchResult:
        """Reverse geocode a single point."""
        raise NotImplementedError
