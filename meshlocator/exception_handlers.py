from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from meshlocator.errors import InvalidIpError, MeshLookupError
from meshlocator.logger import logger
from meshlocator.models.response_models import LookupResult


def _get_ip_from_request(request: Request) -> str | None:
    """Best-effort extraction of the `ip` query parameter for log lines."""
    return request.query_params.get("ip")


def _failed_fields(exc: ValidationError) -> list[str]:
    """Names of the fields that failed validation, e.g. ["ip"]."""
    return [str(error["loc"][-1]) for error in exc.errors(include_url=False) if error.get("loc")]


def _build_validation_error_result(exc: ValidationError) -> LookupResult:
    """Normalize validation errors into the standard lookup result shape.

    Only `ip` can fail validation on the lookup endpoint; anything else is
    reported as a generic invalid request. Internal validation details are not
    exposed to clients.
    """
    if "ip" in _failed_fields(exc):
        return LookupResult.failure(InvalidIpError.status, "Invalid or missing IPv4 address for client.")
    return LookupResult.failure("invalid_request", "Invalid request parameters")


def _result_response(status_code: int, result: LookupResult) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=result.model_dump())


async def pydantic_validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle Pydantic validation errors raised during dependency resolution."""
    logger.info(
        "Pydantic validation error during request handling "
        f"path={request.url.path} method={request.method} ip={_get_ip_from_request(request)} "
        f"fields={_failed_fields(exc)}"
    )
    return _result_response(status.HTTP_400_BAD_REQUEST, _build_validation_error_result(exc))


async def mesh_lookup_exception_handler(request: Request, exc: MeshLookupError) -> JSONResponse:
    """Map terminal lookup errors to their status code and a null-filled result."""
    logger.error(
        "Lookup failed "
        f"path={request.url.path} method={request.method} client_ip={exc.client_ip} "
        f"status={exc.status} error={exc}"
    )
    return _result_response(exc.http_status, LookupResult.failure(exc.status, str(exc), exc.client_ip))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected errors to return a structured 500 response."""
    logger.exception(
        "Unhandled exception while processing request: "
        f"{repr(exc)} path={request.url.path} method={request.method} ip={_get_ip_from_request(request)}"
    )
    result = LookupResult.failure(
        "internal_error",
        "An unexpected error occurred while processing the request.",
    )
    return _result_response(status.HTTP_500_INTERNAL_SERVER_ERROR, result)
