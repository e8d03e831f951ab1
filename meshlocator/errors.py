from http import HTTPStatus


class AppError(Exception):
    """Base application error for the mesh node locator."""


class MeshLookupError(AppError):
    """Base error for lookups that end without a gateway record.

    Every subclass is terminal for the current lookup and carries the status
    code string reported to the caller alongside the HTTP status it maps to.
    """

    status: str = "lookup_failed"
    http_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, client_ip: str | None = None) -> None:
        super().__init__(message)
        self.client_ip = client_ip


class InvalidIpError(MeshLookupError):
    """Raised when the client address is missing or not a valid IPv4 address."""

    status = "invalid_ip"
    http_status = HTTPStatus.BAD_REQUEST


class NotMeshIpError(MeshLookupError):
    """Raised when the client address lies outside the mesh network."""

    status = "not_mesh_ip"
    http_status = HTTPStatus.FORBIDDEN


class RouterUnreachableError(MeshLookupError):
    """Raised when neither an inferred gateway nor the client itself answered."""

    status = "router_unreachable"
    http_status = HTTPStatus.BAD_GATEWAY
