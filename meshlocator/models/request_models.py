from pydantic import BaseModel, Field, field_validator

from meshlocator.subnets import parse_ipv4


class MeshLookupRequest(BaseModel):
    """Request model for a gateway lookup via query parameters.

    If `ip` is provided, the service looks up that explicit client address.
    If `ip` is omitted or blank, the address the request arrived from is used.
    """

    ip: str | None = Field(
        default=None,
        description="IPv4 client address inside the mesh. If omitted, the caller's address is used.",
        examples=["10.190.71.239"],
    )

    @field_validator("ip", mode="before")
    @classmethod
    def _validate_ip(cls, value: str | None) -> str | None:
        """Validate that ip is either empty/None or a valid IPv4 address.

        - None or blank string -> treated as None (caller address lookup).
        - Non-blank -> must be a valid IPv4 literal, otherwise a validation error
          is raised and the endpoint handler is never invoked.
        """
        if value is None:
            return None

        value_str = str(value).strip()
        if not value_str:
            return None

        try:
            parse_ipv4(value_str)
        except ValueError as exc:
            raise ValueError("ip must be a valid IPv4 address") from exc

        return value_str
