from functools import lru_cache
from typing import Annotated

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from meshlocator.config import get_settings
from meshlocator.errors import MeshLookupError
from meshlocator.exception_handlers import (
    mesh_lookup_exception_handler,
    pydantic_validation_exception_handler,
    unhandled_exception_handler,
)
from meshlocator.logger import logger
from meshlocator.models.request_models import MeshLookupRequest
from meshlocator.models.response_models import HealthResponse, LookupResult
from meshlocator.services.lookup import LookupService

app = FastAPI(
    title="Mesh Node Locator",
    version="0.1.0",
    description="Finds the mesh gateway node serving a client address and where that node is located.",
)
logger.info("Started Mesh Node Locator")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_origins),
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With"],
    max_age=86400,
)


@lru_cache
def get_lookup_service() -> LookupService:
    """Dependency providing the process-wide LookupService."""
    return LookupService.from_settings(get_settings())


# Register global exception handlers using the shared handlers module.
app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)
app.add_exception_handler(MeshLookupError, mesh_lookup_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="ok")


@app.get(
    "/v1/mesh/lookup",
    response_model=LookupResult,
    status_code=status.HTTP_200_OK,
    tags=["mesh"],
    summary="Find the gateway node serving a mesh client and its location.",
)
async def mesh_lookup(
    request: Request,
    query: Annotated[MeshLookupRequest, Depends()],
    service: Annotated[LookupService, Depends(get_lookup_service)],
) -> LookupResult:
    """Look up the gateway node for either a specific client IP or the caller's IP.

    - If `query.ip` is provided, that address is used.
    - Otherwise, the caller's address is taken from the request (`request.client.host`).

    Failures are raised as MeshLookupError subclasses and rendered by the
    registered exception handler with the same response shape.
    """
    observed_ip = request.client.host if request.client else None
    logger.info(
        "Performing mesh lookup "
        f"path={request.url.path} method={request.method} ip={query.ip} observed_ip={observed_ip}"
    )
    return await service.lookup(query.ip, observed_ip=observed_ip)
