from collections.abc import Callable
from http import HTTPStatus
from typing import Any

import httpx

from meshlocator.cache import CLIENT_NAMESPACE, GEO_NAMESPACE, CacheStore
from meshlocator.clients.base import BaseReverseGeocoder
from meshlocator.config import Settings
from meshlocator.models.common import FetchResult, FetchStatus
from meshlocator.services.geo import GeoEnricher
from meshlocator.services.lookup import LookupService
from meshlocator.services.rdns import ReverseDnsResolver
from meshlocator.services.resolver import GatewayResolver

GEOAPIFY_PROPERTIES = {
    "country": "United States",
    "country_code": "us",
    "state": "Oregon",
    "state_code": "OR",
    "city": "Salem",
    "county": "Marion County",
    "county_code": "047",
}


class MockResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str = "", invalid_json: bool = False) -> None:
        self.status_code = status_code
        self._payload = {} if payload is None else payload
        self._invalid_json = invalid_json
        self.text = text

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class MockAsyncClient:
    """Minimal async context-manager mock for httpx.AsyncClient.

    Every GET is recorded in `requests` as a (url, params) pair.
    """

    def __init__(self, response: MockResponse, requests: list[tuple[str, Any]] | None = None) -> None:
        self._response = response
        self.requests = requests if requests is not None else []

    async def __aenter__(self) -> "MockAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str, params: Any = None) -> MockResponse:
        self.requests.append((url, params))
        return self._response


class FailingAsyncClient:
    """Async client that raises a RequestError on enter to simulate network failure.

    The target URL is provided at construction time, so tests for different
    clients can reuse this implementation with different base URLs.
    """

    def __init__(self, url: str, *args: Any, exc_type: type[httpx.RequestError] = httpx.ConnectError, **kwargs: Any):
        self._url = url
        self._exc_type = exc_type

    async def __aenter__(self) -> "FailingAsyncClient":
        request = httpx.Request("GET", self._url)
        raise self._exc_type("Network failure", request=request)

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str, params: Any = None) -> MockResponse:
        return MockResponse(status_code=HTTPStatus.OK, payload={})


def make_fake_async_client(
    response: MockResponse, requests: list[tuple[str, Any]] | None = None
) -> Callable[..., MockAsyncClient]:
    """Factory for a fake httpx.AsyncClient returning a fixed response."""

    def _fake_client(*args: Any, **kwargs: Any) -> MockAsyncClient:
        return MockAsyncClient(response, requests)

    return _fake_client


class FakeSysinfoClient:
    """Stand-in for SysinfoClient answering only for the configured addresses."""

    def __init__(self, documents: dict[str, dict[str, Any]] | None = None) -> None:
        self._documents = documents or {}
        self.calls: list[str] = []

    async def fetch(self, ip: str) -> FetchResult:
        self.calls.append(ip)
        if ip in self._documents:
            return FetchResult.success(self._documents[ip])
        return FetchResult.failure(FetchStatus.transport_error, "ConnectTimeout('timed out')")


class FakeGeocoder(BaseReverseGeocoder):
    """Reverse geocoder returning a fixed result and recording each call."""

    def __init__(self, result: FetchResult | None = None) -> None:
        super().__init__(timeout_seconds=1.0)
        self._result = result or FetchResult.success(dict(GEOAPIFY_PROPERTIES))
        self.calls: list[tuple[float, float]] = []

    async def reverse(self, lat: float, lon: float) -> FetchResult:
        self.calls.append((lat, lon))
        return self._result


def make_settings(cache_dir: Any, **overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "cache_dir": str(cache_dir),
        "enable_rdns": False,
        "geoapify_api_key": "test-key",
    }
    values.update(overrides)
    return Settings(**values)


def make_cache(settings: Settings, clock: Callable[[], float] | None = None) -> CacheStore:
    ttls = {
        CLIENT_NAMESPACE: settings.client_cache_ttl_seconds,
        GEO_NAMESPACE: settings.geo_cache_ttl_seconds,
    }
    if clock is None:
        return CacheStore(settings.cache_dir, ttls)
    return CacheStore(settings.cache_dir, ttls, clock=clock)


def build_lookup_service(
    settings: Settings,
    probe_client: FakeSysinfoClient,
    geocoder: BaseReverseGeocoder | None = None,
    cache: CacheStore | None = None,
) -> LookupService:
    """Wire a LookupService around fake outbound collaborators."""
    cache = cache or make_cache(settings)
    return LookupService(
        settings=settings,
        cache=cache,
        resolver=GatewayResolver(probe_client),
        geo_enricher=GeoEnricher(settings, cache, geocoder),
        rdns=ReverseDnsResolver(settings),
    )
