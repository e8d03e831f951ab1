from pydantic import BaseModel

from meshlocator.models.common import GatewayRecord, GeoRecord

STATUS_OK = "ok"


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str


class LookupResult(BaseModel):
    """Response model for a gateway lookup.

    Every field is always serialized; unknown values are explicit nulls so
    callers never have to infer anything from a missing key.
    """

    status: str
    error: str | None
    client_ip: str | None
    client_rdns: str | None = None
    router_ip: str | None = None
    router_rdns: str | None = None
    netmask_cidr: int | None = None
    netmask: str | None = None
    node: str | None = None
    lat: float | None = None
    lon: float | None = None
    gridsquare: str | None = None
    country: str | None = None
    state: str | None = None
    state_code: str | None = None
    city: str | None = None
    county: str | None = None

    @classmethod
    def ok(
        cls,
        client_ip: str,
        gateway: GatewayRecord,
        geo: GeoRecord | None = None,
        client_rdns: str | None = None,
        router_rdns: str | None = None,
    ) -> "LookupResult":
        geo = geo or GeoRecord()
        return cls(
            status=STATUS_OK,
            error=None,
            client_ip=client_ip,
            client_rdns=client_rdns,
            router_ip=gateway.router_ip,
            router_rdns=router_rdns,
            netmask_cidr=gateway.netmask_cidr,
            netmask=gateway.netmask,
            node=gateway.node,
            lat=gateway.lat,
            lon=gateway.lon,
            gridsquare=gateway.gridsquare,
            **geo.model_dump(),
        )

    @classmethod
    def failure(cls, status: str, message: str, client_ip: str | None = None) -> "LookupResult":
        """Terminal result: status and error set, every data field null."""
        return cls(status=status, error=message, client_ip=client_ip)
