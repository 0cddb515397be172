"""
Riding lookup without a browser: geocoder + boundary containment.

  address ──► Nominatim (lat, lon) ──► Represent boundaries?contains= ──► riding
  postal  ──► local prefix table ──► Represent postcodes/<code> ──► prefix heuristic

Neither entry point raises. Every failure, from DNS errors to unexpected
JSON, degrades to a result with ``none`` or ``low`` confidence so entry
forms can always show something and flag it for review.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from .config import Settings
from .exceptions import ServiceError
from .models import (
    BoundaryListResponse,
    BoundaryMatch,
    Confidence,
    ExtractionResult,
    GeocodeCoordinate,
    LookupSource,
    NominatimPlace,
    PostcodeResponse,
    RidingLookupResult,
)

logger = logging.getLogger(__name__)


# ─── Result Labels ───────────────────────────────────────────────────

ADDRESS_NOT_FOUND = "Address not found"
OUTSIDE_BOUNDARIES = "Outside defined boundaries"
SERVICE_ERROR = "Service Error - Try Manual"
UNKNOWN_BC_RIDING = "Unknown BC Riding"
OUTSIDE_BC = "Outside BC"

# BC postal codes all start with "V"
SERVICE_REGION_PREFIX = "V"

# Forward sortation area → riding, checked before any network call
POSTAL_PREFIX_RIDINGS: dict[str, str] = {
    "V6B": "Vancouver-False Creek",
    "V6C": "Vancouver-Coal Harbour",
    "V5H": "Burnaby North",
    "V3T": "Surrey-Whalley",
    "V3R": "Surrey-Whalley",
}

_NOMINATIM_RESULTS = TypeAdapter(list[NominatimPlace])


def postal_prefix(postal_code: str) -> str:
    """``"v6b 1a1"`` → ``"V6B"``."""
    return re.sub(r"\s", "", postal_code or "").upper()[:3]


class GeocodeBoundaryResolver:
    """Async client for the geocoder and the electoral boundary service.

    Usage:
        async with GeocodeBoundaryResolver(settings) as resolver:
            result = await resolver.lookup_by_address("14408 Chartwell Dr, Surrey")

    Pass ``client`` to share a connection pool or to inject a mock transport;
    an injected client is not closed by ``aclose()``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        prefix_table: dict[str, str] | None = None,
    ):
        self.settings = settings or Settings()
        self.prefix_table = POSTAL_PREFIX_RIDINGS if prefix_table is None else prefix_table
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self.settings.http_timeout_s,
            headers={"User-Agent": self.settings.user_agent},
        )

    async def __aenter__(self) -> GeocodeBoundaryResolver:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ─── Public API ──────────────────────────────────────────────────

    async def lookup_by_address(self, address: str) -> RidingLookupResult:
        """Geocode an address and find the electoral boundary containing it."""
        logger.info("Looking up riding for address %r", address)
        try:
            coordinate = await self._geocode(address)
            if coordinate is None:
                return self._result(ADDRESS_NOT_FOUND, Confidence.NONE, LookupSource.ADDRESS)

            logger.info("Geocoded %r to %s, %s", address, coordinate.lat, coordinate.lon)
            boundary = await self._containing_boundary(coordinate)
        except ServiceError as exc:
            logger.error("Riding lookup failed for %r: %s", address, exc)
            return self._result(SERVICE_ERROR, Confidence.NONE, LookupSource.ADDRESS)

        if boundary is None:
            return self._result(OUTSIDE_BOUNDARIES, Confidence.LOW, LookupSource.ADDRESS)
        return self._result(boundary.display_name(), Confidence.HIGH, LookupSource.ADDRESS)

    async def lookup_by_postal_code(self, postal_code: str) -> RidingLookupResult:
        """Resolve a riding from a postal code: local table, then remote, then heuristic."""
        prefix = postal_prefix(postal_code)

        riding = self.prefix_table.get(prefix)
        if riding:
            logger.info("Postal prefix %s resolved from local table", prefix)
            return self._result(riding, Confidence.MEDIUM, LookupSource.POSTAL_CODE)

        try:
            boundary = await self._postcode_boundary(postal_code)
        except ServiceError as exc:
            logger.warning("Postal code lookup failed for %r: %s", postal_code, exc)
            boundary = None

        if boundary is not None:
            return self._result(boundary.name, Confidence.MEDIUM, LookupSource.POSTAL_CODE)

        if prefix.startswith(SERVICE_REGION_PREFIX):
            return self._result(UNKNOWN_BC_RIDING, Confidence.LOW, LookupSource.POSTAL_CODE)
        return self._result(OUTSIDE_BC, Confidence.NONE, LookupSource.POSTAL_CODE)

    # ─── Remote Calls ────────────────────────────────────────────────

    async def _geocode(self, address: str) -> GeocodeCoordinate | None:
        data = await self._get_json(
            self.settings.nominatim_url,
            {"q": address, "format": "json", "limit": 1},
        )
        try:
            places = _NOMINATIM_RESULTS.validate_python(data)
        except ValidationError as exc:
            raise ServiceError("Unexpected geocoder response", {"errors": exc.errors()}) from exc
        return places[0].coordinate() if places else None

    async def _containing_boundary(self, coordinate: GeocodeCoordinate) -> BoundaryMatch | None:
        data = await self._get_json(
            f"{self.settings.represent_url}/boundaries/",
            {
                "contains": f"{coordinate.lat},{coordinate.lon}",
                "sets": self.settings.boundary_set,
            },
        )
        try:
            response = BoundaryListResponse.model_validate(data)
        except ValidationError as exc:
            raise ServiceError("Unexpected boundary response", {"errors": exc.errors()}) from exc
        return response.objects[0].to_match() if response.objects else None

    async def _postcode_boundary(self, postal_code: str) -> BoundaryMatch | None:
        code = re.sub(r"\s", "", postal_code or "").upper()
        if not code:
            return None
        data = await self._get_json(
            f"{self.settings.represent_url}/postcodes/{code}/",
            {"sets": self.settings.boundary_set},
        )
        try:
            response = PostcodeResponse.model_validate(data)
        except ValidationError as exc:
            raise ServiceError("Unexpected postcode response", {"errors": exc.errors()}) from exc
        centroid = response.boundaries_centroid
        return centroid[0].to_match() if centroid else None

    async def _get_json(self, url: str, params: dict[str, Any]) -> Any:
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise ServiceError(
                f"{url} returned {exc.response.status_code}",
                {"url": url, "status": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            raise ServiceError(f"{url} unreachable: {exc}", {"url": url}) from exc
        except ValueError as exc:
            raise ServiceError(f"{url} returned invalid JSON", {"url": url}) from exc

    @staticmethod
    def _result(value: str, confidence: Confidence, source: LookupSource) -> RidingLookupResult:
        return RidingLookupResult.from_extraction(
            ExtractionResult(value=value, confidence=confidence, source=source)
        )
