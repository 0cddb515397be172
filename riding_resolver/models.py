"""
Pydantic models for resolution results and external API payloads.

Results share one confidence vocabulary across every resolution path.
External JSON is validated here, at the boundary, instead of being trusted
field by field downstream.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field


# ─── Confidence Levels ──────────────────────────────────────────────


class Confidence(str, Enum):
    """How trustworthy a resolved riding or value is."""

    HIGH = "high"  # Boundary containment or automation match
    MEDIUM = "medium"  # Postal-code prefix or centroid match
    LOW = "low"  # Heuristic only
    NONE = "none"  # No usable answer

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank >= other.rank


_CONFIDENCE_RANK: dict[Confidence, int] = {
    Confidence.NONE: 0,
    Confidence.LOW: 1,
    Confidence.MEDIUM: 2,
    Confidence.HIGH: 3,
}


class LookupSource(str, Enum):
    """Which input a result was derived from."""

    ADDRESS = "address"
    POSTAL_CODE = "postal_code"


# ─── Results ────────────────────────────────────────────────────────


class ExtractionResult(BaseModel):
    """A confidence-graded answer from any resolution path.

    ``needs_review`` is derived from ``confidence`` so no caller can produce
    a below-high result that skips human review.
    """

    value: str
    confidence: Confidence
    source: LookupSource

    @computed_field  # type: ignore[prop-decorator]
    @property
    def needs_review(self) -> bool:
        return self.confidence is not Confidence.HIGH


class RidingLookupResult(BaseModel):
    """Direct-call shape consumed by address and postal-code entry forms."""

    riding: str
    confidence: Confidence
    needs_review: bool
    source: LookupSource

    @classmethod
    def from_extraction(cls, result: ExtractionResult) -> RidingLookupResult:
        return cls(
            riding=result.value,
            confidence=result.confidence,
            needs_review=result.needs_review,
            source=result.source,
        )


# ─── Address ────────────────────────────────────────────────────────


class AddressQuery(BaseModel):
    """A raw address together with the query string sent to lookup sites."""

    raw: str
    canonical: str
    unit: Optional[str] = None


# ─── Geocoding / Boundary Values ────────────────────────────────────


class GeocodeCoordinate(BaseModel):
    lat: float
    lon: float


class BoundaryMatch(BaseModel):
    name: str
    external_code: Optional[str] = None

    def display_name(self) -> str:
        """``"Name (CODE)"`` when the boundary carries a code, else the bare name."""
        if self.external_code:
            return f"{self.name} ({self.external_code})"
        return self.name


# ─── External API Payloads ──────────────────────────────────────────
# Only the fields we read are declared; everything else is ignored.


class NominatimPlace(BaseModel):
    """One entry of a Nominatim ``/search?format=json`` response."""

    lat: float
    lon: float
    display_name: str = ""

    def coordinate(self) -> GeocodeCoordinate:
        return GeocodeCoordinate(lat=self.lat, lon=self.lon)


class RepresentBoundary(BaseModel):
    """A boundary object from Represent (Open North)."""

    name: str
    external_id: Optional[str] = None

    def to_match(self) -> BoundaryMatch:
        return BoundaryMatch(name=self.name, external_code=self.external_id or None)


class BoundaryListResponse(BaseModel):
    """Represent ``/boundaries/?contains=…`` response."""

    objects: list[RepresentBoundary] = Field(default_factory=list)


class PostcodeResponse(BaseModel):
    """Represent ``/postcodes/<code>/`` response."""

    code: Optional[str] = None
    boundaries_centroid: list[RepresentBoundary] = Field(default_factory=list)
