"""
Riding Resolver FastAPI Server
==============================

HTTP surface for the volunteer-management UI.

Endpoints:
    POST /extract-riding              Electoral district via browser automation
    POST /extract-property            Assessed value via browser automation
    POST /lookup/address              Riding via geocoder + boundary service
    GET  /lookup/postal-code/{code}   Riding via postal code
    GET  /health                      Health check / readiness probe

Run:
    uvicorn api:app --port 3001           # Dev (http://localhost:3001)
    RIDING_HEADLESS=1 uvicorn api:app     # Server without a display

Browsers must be installed once: ``playwright install chromium``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from riding_resolver import __version__
from riding_resolver.browser import BrowserSession
from riding_resolver.config import Settings
from riding_resolver.exceptions import InputError, RidingResolverError, ServiceUnavailableError
from riding_resolver.geocode import GeocodeBoundaryResolver
from riding_resolver.models import RidingLookupResult
from riding_resolver.property_workflow import extract_property_value
from riding_resolver.riding_workflow import extract_riding

load_dotenv()

logger = logging.getLogger("riding_resolver.api")

_settings = Settings.from_env()


# ─── Application Lifespan (one browser session per process) ─────────

_session: BrowserSession | None = None
_resolver: GeocodeBoundaryResolver | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared browser session and HTTP client; tear them down on exit.

    The browser itself launches lazily on the first automation request.
    """
    global _session, _resolver  # noqa: PLW0603
    logging.basicConfig(
        level=_settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _session = BrowserSession(_settings)
    _resolver = GeocodeBoundaryResolver(_settings)
    yield
    await _session.close()
    await _resolver.aclose()
    _session = None
    _resolver = None


# ─── FastAPI App ─────────────────────────────────────────────────────

app = FastAPI(
    title="Riding Resolver API",
    description=(
        "Resolves civic addresses to BC electoral districts and assessed "
        "property values. Browser automation against public lookup sites, "
        "with a geocoder + boundary-service fallback that returns "
        "confidence-graded results."
    ),
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(_settings.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Request / Response Schemas ─────────────────────────────────────


class AddressRequest(BaseModel):
    """Request body for the extraction and lookup endpoints."""

    address: Optional[str] = Field(
        default=None,
        description="Free-text civic address.",
        json_schema_extra={"example": "738 Broughton Street, Suite 2104, Vancouver"},
    )


class RidingResponse(BaseModel):
    riding: str
    success: bool = True


class PropertyResponse(BaseModel):
    value: str
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
    success: bool = False


class HealthResponse(BaseModel):
    status: str
    version: str
    browser_connected: bool


# ─── Error Envelope ──────────────────────────────────────────────────


@app.exception_handler(RidingResolverError)
async def _resolver_error_handler(request: Request, exc: RidingResolverError) -> JSONResponse:
    logger.error("%s %s failed [%s]: %s", request.method, request.url.path, exc.code, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc)).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error="Request body must be JSON with an 'address' field").model_dump(),
    )


@app.exception_handler(Exception)
async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s crashed", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=f"Unexpected error: {exc}").model_dump(),
    )


# ─── Helpers ─────────────────────────────────────────────────────────


def _get_session() -> BrowserSession:
    if _session is None:
        raise ServiceUnavailableError("Browser session not initialised")
    return _session


def _get_resolver() -> GeocodeBoundaryResolver:
    if _resolver is None:
        raise ServiceUnavailableError("Resolver not initialised")
    return _resolver


def _require_address(request: AddressRequest) -> str:
    if request.address is None or not request.address.strip():
        raise InputError("Address is required")
    return request.address.strip()


_FAILURE_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Address missing"},
    500: {"model": ErrorResponse, "description": "Automation failed"},
    503: {"model": ErrorResponse, "description": "Service not yet initialised"},
}


# ─── Automation Endpoints ────────────────────────────────────────────


@app.post(
    "/extract-riding",
    summary="Extract the electoral district for an address",
    tags=["Automation"],
    responses=_FAILURE_RESPONSES,
)
async def extract_riding_endpoint(request: AddressRequest) -> RidingResponse:
    """Drive the Elections BC lookup site and return the district as displayed,
    e.g. `Surrey-Fleetwood (SRF)`.
    """
    address = _require_address(request)
    riding = await extract_riding(_get_session(), address, _settings)
    return RidingResponse(riding=riding)


@app.post(
    "/extract-property",
    summary="Extract the assessed property value for an address",
    tags=["Automation"],
    responses={
        **_FAILURE_RESPONSES,
        404: {"model": ErrorResponse, "description": "No assessed value found"},
    },
)
async def extract_property_endpoint(request: AddressRequest) -> PropertyResponse:
    """Drive the BC Assessment site and return the total assessed value."""
    address = _require_address(request)
    value = await extract_property_value(_get_session(), address, _settings)
    return PropertyResponse(value=value)


# ─── Lookup Endpoints ────────────────────────────────────────────────


@app.post(
    "/lookup/address",
    summary="Resolve a riding by geocoding an address",
    tags=["Lookup"],
    responses={400: {"model": ErrorResponse, "description": "Address missing"}},
)
async def lookup_address_endpoint(request: AddressRequest) -> RidingLookupResult:
    """Never fails on upstream errors: the result carries `confidence` and
    `needs_review` instead.
    """
    address = _require_address(request)
    return await _get_resolver().lookup_by_address(address)


@app.get(
    "/lookup/postal-code/{postal_code}",
    summary="Resolve a riding from a postal code",
    tags=["Lookup"],
)
async def lookup_postal_code_endpoint(postal_code: str) -> RidingLookupResult:
    return await _get_resolver().lookup_by_postal_code(postal_code)


@app.get(
    "/health",
    summary="Health check",
    tags=["System"],
    responses={503: {"model": ErrorResponse, "description": "Service not yet initialised"}},
)
def health_check() -> HealthResponse:
    """Returns service status and whether a browser is currently running."""
    session = _get_session()
    return HealthResponse(
        status="healthy",
        version=__version__,
        browser_connected=session.is_connected,
    )
