import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from meshlocator.subnets import cidr_to_netmask

MAX_LATITUDE = 90.0
MAX_LONGITUDE = 180.0


class FetchStatus(str, Enum):
    """Outcome of a single outbound HTTP call."""

    success = "success"
    transport_error = "transport_error"
    http_error = "http_error"
    malformed_payload = "malformed_payload"


class FetchResult(BaseModel):
    """Result of an outbound call that never raises.

    Clients report what went wrong instead of raising; callers decide how the
    failure kinds fold into their own control flow.
    """

    model_config = ConfigDict(frozen=True)

    status: FetchStatus
    payload: dict[str, Any] | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.success

    @classmethod
    def success(cls, payload: dict[str, Any]) -> "FetchResult":
        return cls(status=FetchStatus.success, payload=payload)

    @classmethod
    def failure(cls, status: FetchStatus, detail: str) -> "FetchResult":
        return cls(status=status, detail=detail)


def _coerce_coordinate(value: Any, limit: float) -> float | None:
    """Allow coordinates to be provided as strings, numbers, or null.

    Gateways report lat/lon as JSON strings; anything that is not a finite
    number within +/- `limit` degrees is treated as absent.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        coordinate = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(coordinate) or abs(coordinate) > limit:
        return None
    return coordinate


class GatewayRecord(BaseModel):
    """Identity and self-reported location of the gateway serving a client."""

    model_config = ConfigDict(frozen=True)

    router_ip: str
    netmask_cidr: int | None = None
    node: str | None = None
    lat: float | None = None
    lon: float | None = None
    gridsquare: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _pair_coordinates(cls, data: Any) -> Any:
        """Coerce lat/lon and keep them only as a pair.

        A status document carrying a single coordinate cannot be placed on a
        map or geocoded, so both values are dropped.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)
        lat = _coerce_coordinate(data.get("lat"), MAX_LATITUDE)
        lon = _coerce_coordinate(data.get("lon"), MAX_LONGITUDE)
        if lat is None or lon is None:
            lat = lon = None
        data["lat"] = lat
        data["lon"] = lon
        return data

    @field_validator("node", "gridsquare", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        if value is None or isinstance(value, (dict, list)):
            return None
        return str(value)

    @property
    def netmask(self) -> str | None:
        if self.netmask_cidr is None:
            return None
        return cidr_to_netmask(self.netmask_cidr)

    @classmethod
    def from_sysinfo(cls, router_ip: str, netmask_cidr: int | None, sysinfo: dict[str, Any]) -> "GatewayRecord":
        """Build a record from a gateway status document.

        Only `node`, `lat`, `lon` and `gridsquare` are read; every other key in
        the document is ignored.
        """
        return cls(
            router_ip=router_ip,
            netmask_cidr=netmask_cidr,
            node=sysinfo.get("node"),
            lat=sysinfo.get("lat"),
            lon=sysinfo.get("lon"),
            gridsquare=sysinfo.get("gridsquare"),
        )


class GeoRecord(BaseModel):
    """Reverse geocode of a gateway's coordinates.

    Country and county codes are deliberately not part of this shape.
    """

    model_config = ConfigDict(frozen=True)

    country: str | None = None
    state: str | None = None
    state_code: str | None = None
    city: str | None = None
    county: str | None = None

    @classmethod
    def from_properties(cls, properties: dict[str, Any]) -> "GeoRecord":
        return cls(
            country=properties.get("country"),
            state=properties.get("state"),
            state_code=properties.get("state_code"),
            city=properties.get("city"),
            county=properties.get("county"),
        )
