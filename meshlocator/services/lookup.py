import asyncio

from pydantic import ValidationError

from meshlocator.cache import CLIENT_NAMESPACE, GEO_NAMESPACE, CacheStore
from meshlocator.clients.geoapify_client import GeoapifyClient
from meshlocator.clients.sysinfo_client import SysinfoClient
from meshlocator.config import Settings
from meshlocator.errors import InvalidIpError, NotMeshIpError, RouterUnreachableError
from meshlocator.logger import logger
from meshlocator.models.response_models import LookupResult
from meshlocator.services.geo import GeoEnricher
from meshlocator.services.rdns import ReverseDnsResolver
from meshlocator.services.resolver import GatewayResolver
from meshlocator.subnets import CANDIDATE_PREFIXES, in_network, parse_ipv4


class LookupService:
    """Top-level gateway lookup for a single client address.

    Flow: validate the address, serve from the client cache when fresh,
    otherwise resolve the gateway, geocode its coordinates, attach reverse DNS
    names and cache the assembled result.
    """

    def __init__(
        self,
        settings: Settings,
        cache: CacheStore,
        resolver: GatewayResolver,
        geo_enricher: GeoEnricher,
        rdns: ReverseDnsResolver,
    ) -> None:
        self._settings = settings
        self._cache = cache
        self._resolver = resolver
        self._geo_enricher = geo_enricher
        self._rdns = rdns

    @classmethod
    def from_settings(cls, settings: Settings) -> "LookupService":
        """Wire the production collaborators described by `settings`."""
        cache = CacheStore(
            settings.cache_dir,
            ttls={
                CLIENT_NAMESPACE: settings.client_cache_ttl_seconds,
                GEO_NAMESPACE: settings.geo_cache_ttl_seconds,
            },
        )
        probe_client = SysinfoClient(settings.sysinfo_path, timeout_seconds=settings.probe_timeout_seconds)
        geocoder = None
        if settings.geocoding_available:
            geocoder = GeoapifyClient(
                settings.geoapify_api_key,
                base_url=settings.geoapify_base_url,
                timeout_seconds=settings.geocoder_timeout_seconds,
            )
        return cls(
            settings=settings,
            cache=cache,
            resolver=GatewayResolver(probe_client),
            geo_enricher=GeoEnricher(settings, cache, geocoder),
            rdns=ReverseDnsResolver(settings),
        )

    async def lookup(self, client_ip: str | None, observed_ip: str | None = None) -> LookupResult:
        """Look up the gateway serving `client_ip` (or `observed_ip` when not given).

        Raises InvalidIpError, NotMeshIpError or RouterUnreachableError when the
        lookup cannot produce a gateway.
        """
        client_ip = self._validate_client_ip(client_ip, observed_ip)

        cached = await asyncio.to_thread(self._load_cached, client_ip)
        if cached is not None:
            logger.info(f"Client cache hit client_ip={client_ip}")
            return cached

        gateway = await self._resolver.resolve(client_ip)
        if gateway is None:
            prefixes = ", ".join(f"/{prefix}" for prefix in CANDIDATE_PREFIXES)
            raise RouterUnreachableError(
                f"Unable to reach router sysinfo for any inferred router in {prefixes} around {client_ip}. "
                "Is the node/router up?",
                client_ip=client_ip,
            )

        geo = await self._geo_enricher.enrich(gateway.lat, gateway.lon)
        result = LookupResult.ok(
            client_ip=client_ip,
            gateway=gateway,
            geo=geo,
            client_rdns=await self._rdns.ptr(client_ip),
            router_rdns=await self._rdns.router_ptr(gateway.router_ip),
        )

        await asyncio.to_thread(self._cache.save, CLIENT_NAMESPACE, client_ip, result.model_dump())
        return result

    def _validate_client_ip(self, client_ip: str | None, observed_ip: str | None) -> str:
        candidate = (client_ip or "").strip() or (observed_ip or "").strip()
        try:
            parse_ipv4(candidate)
        except ValueError as exc:
            raise InvalidIpError("Invalid or missing IPv4 address for client.") from exc

        if not in_network(candidate, self._settings.mesh_network):
            raise NotMeshIpError(
                f"Client IP is not in {self._settings.mesh_network} mesh space.",
                client_ip=candidate,
            )
        return candidate

    def _load_cached(self, client_ip: str) -> LookupResult | None:
        payload = self._cache.load(CLIENT_NAMESPACE, client_ip)
        if payload is None:
            return None
        try:
            return LookupResult.model_validate(payload)
        except ValidationError:
            logger.warning(f"Ignoring malformed client cache entry client_ip={client_ip}")
            return None
