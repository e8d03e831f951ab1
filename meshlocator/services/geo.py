import asyncio
import math
from decimal import ROUND_HALF_UP, Decimal

from pydantic import ValidationError

from meshlocator.cache import GEO_NAMESPACE, CacheStore
from meshlocator.clients.base import BaseReverseGeocoder
from meshlocator.config import Settings
from meshlocator.logger import logger
from meshlocator.models.common import GeoRecord

# Two decimals is roughly a half-mile grid: every gateway in a neighbourhood
# shares one geocode.
_QUANTUM = Decimal("0.01")


def _round_coordinate(value: float) -> float:
    # Half away from zero on the decimal representation, not on the binary float.
    return float(Decimal(repr(float(value))).quantize(_QUANTUM, rounding=ROUND_HALF_UP))


def quantize(lat: float, lon: float) -> tuple[float, float]:
    return _round_coordinate(lat), _round_coordinate(lon)


def geo_cache_key(lat: float, lon: float) -> str:
    """Cache key of the grid bucket containing (lat, lon), e.g. `45.28_-123.02`."""
    lat_q, lon_q = quantize(lat, lon)
    return f"{lat_q:g}_{lon_q:g}"


class GeoEnricher:
    """Reverse geocodes gateway coordinates through the geo cache."""

    def __init__(self, settings: Settings, cache: CacheStore, geocoder: BaseReverseGeocoder | None) -> None:
        self._enabled = settings.geocoding_available
        self._cache = cache
        self._geocoder = geocoder

    async def enrich(self, lat: float | None, lon: float | None) -> GeoRecord | None:
        if lat is None or lon is None or not self._enabled or self._geocoder is None:
            return None
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return None

        lat_q, lon_q = quantize(lat, lon)
        key = geo_cache_key(lat, lon)

        cached = await asyncio.to_thread(self._cache.load, GEO_NAMESPACE, key)
        if cached is not None:
            try:
                record = GeoRecord.model_validate(cached)
            except ValidationError:
                logger.warning(f"Ignoring malformed geo cache entry key={key}")
            else:
                logger.debug(f"Geo cache hit key={key}")
                return record

        # Query the bucket, not the raw point, so every lookup in the bucket
        # sends the provider an identical request.
        result = await self._geocoder.reverse(lat_q, lon_q)
        if not result.ok:
            logger.warning(f"Reverse geocoding failed key={key} status={result.status.value} detail={result.detail}")
            return None

        try:
            record = GeoRecord.from_properties(result.payload or {})
        except ValidationError as exc:
            logger.warning(f"Reverse geocoding returned unusable properties key={key} errors={exc.error_count()}")
            return None

        await asyncio.to_thread(self._cache.save, GEO_NAMESPACE, key, record.model_dump())
        return record
