"""
Custom exception hierarchy for riding and property resolution.

Each exception type maps to one failure category so the HTTP layer can pick
a status code without inspecting messages.
"""

from __future__ import annotations


class RidingResolverError(Exception):
    """Base exception for all resolution failures."""

    status_code = 500

    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.details = details or {}
        super().__init__(message)


class InputError(RidingResolverError):
    """The caller supplied a missing or unusable address."""

    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("INPUT_INVALID", message, details)


class AutomationError(RidingResolverError):
    """Navigation, selector or browser launch failure while driving a site."""

    def __init__(self, message: str, details: dict | None = None, code: str = "AUTOMATION_FAILED"):
        super().__init__(code, message, details)


class RidingNotParseableError(AutomationError):
    """The electoral lookup page rendered, but no district name could be read."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, details, code="RIDING_NOT_PARSEABLE")


class NotFoundError(RidingResolverError):
    """The target site never produced the requested value."""

    status_code = 404

    def __init__(self, message: str, details: dict | None = None, code: str = "NOT_FOUND"):
        super().__init__(code, message, details)


class PropertyValueNotFoundError(NotFoundError):
    """No assessed value appeared before the polling budget ran out."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, details, code="PROPERTY_VALUE_NOT_FOUND")


class ServiceError(RidingResolverError):
    """Geocoder or boundary API unreachable, non-success, or malformed.

    Never leaves GeocodeBoundaryResolver; it is always converted into a
    ``none``-confidence result.
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("SERVICE_ERROR", message, details)


class ConfigurationError(RidingResolverError):
    """A ``RIDING_*`` setting could not be parsed at startup."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("CONFIG_INVALID", message, details)


class ServiceUnavailableError(RidingResolverError):
    """The API was called before its browser session or resolver existed."""

    status_code = 503

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("SERVICE_UNAVAILABLE", message, details)
