from typing import Any

from meshlocator.clients.base import BaseReverseGeocoder
from meshlocator.models.common import FetchResult, FetchStatus


class GeoapifyClient(BaseReverseGeocoder):
    """Client for the https://www.geoapify.com/ reverse geocoding API.

    Only the first feature's `properties` object is surfaced; picking the
    fields the service exposes is left to the caller.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.geoapify.com",
        timeout_seconds: float = 3.0,
    ) -> None:
        super().__init__(timeout_seconds)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    async def reverse(self, lat: float, lon: float) -> FetchResult:
        url = f"{self._base_url}/v1/geocode/reverse"
        params = {"lat": lat, "lon": lon, "limit": 1, "apiKey": self._api_key}
        return await self._request(url, params=params)

    def _normalize_payload(self, data: dict[str, Any]) -> FetchResult:
        """Extract `features[0].properties` from the GeoJSON response.

        An empty feature list (e.g. a point in the ocean) or an empty
        properties object is reported as a malformed payload.
        """
        features = data.get("features")
        if not isinstance(features, list) or not features or not isinstance(features[0], dict):
            return FetchResult.failure(FetchStatus.malformed_payload, "Response contains no features")

        properties = features[0].get("properties")
        if not isinstance(properties, dict) or not properties:
            return FetchResult.failure(FetchStatus.malformed_payload, "First feature has no properties")

        return FetchResult.success(properties)
