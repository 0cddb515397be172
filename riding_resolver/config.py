"""
Runtime settings read from ``RIDING_*`` environment variables.

Entry points load a ``.env`` file first (python-dotenv), so local overrides
live there rather than in code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .exceptions import ConfigurationError

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class Settings:
    """Timeouts, endpoints and browser options for every resolution path."""

    # Browser: visible by default so operators can watch the automation
    headless: bool = False
    slow_mo_ms: int = 50
    viewport_width: int = 1280
    viewport_height: int = 800

    # Waits (milliseconds)
    navigation_timeout_ms: int = 30_000
    result_timeout_ms: int = 10_000
    disclaimer_timeout_ms: int = 3_000
    typing_delay_ms: int = 50
    suggestion_settle_ms: int = 1_000
    poll_attempts: int = 10
    poll_interval_ms: int = 1_000

    # Geocoder / boundary services
    nominatim_url: str = "https://nominatim.openstreetmap.org/search"
    represent_url: str = "https://represent.opennorth.ca"
    boundary_set: str = "british-columbia-electoral-districts-2023-redistribution"
    http_timeout_s: float = 10.0
    user_agent: str = "riding-resolver/1.0 (volunteer riding lookup)"

    cors_origins: tuple[str, ...] = field(default_factory=lambda: ("*",))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from the environment, falling back to defaults."""
        env = os.environ if environ is None else environ
        defaults = cls()

        def _int(name: str, default: int) -> int:
            raw = env.get(f"RIDING_{name}")
            if raw is None or raw == "":
                return default
            try:
                return int(raw)
            except ValueError:
                raise ConfigurationError(
                    f"RIDING_{name} must be an integer, got {raw!r}",
                    {"variable": f"RIDING_{name}", "value": raw},
                ) from None

        def _float(name: str, default: float) -> float:
            raw = env.get(f"RIDING_{name}")
            if raw is None or raw == "":
                return default
            try:
                return float(raw)
            except ValueError:
                raise ConfigurationError(
                    f"RIDING_{name} must be a number, got {raw!r}",
                    {"variable": f"RIDING_{name}", "value": raw},
                ) from None

        def _str(name: str, default: str) -> str:
            return env.get(f"RIDING_{name}") or default

        headless_raw = env.get("RIDING_HEADLESS")
        headless = (
            defaults.headless
            if headless_raw is None
            else headless_raw.strip().lower() in _TRUE_VALUES
        )

        origins_raw = env.get("RIDING_CORS_ORIGINS")
        cors_origins = (
            tuple(o.strip() for o in origins_raw.split(",") if o.strip())
            if origins_raw
            else defaults.cors_origins
        )

        return cls(
            headless=headless,
            slow_mo_ms=_int("SLOW_MO_MS", defaults.slow_mo_ms),
            viewport_width=_int("VIEWPORT_WIDTH", defaults.viewport_width),
            viewport_height=_int("VIEWPORT_HEIGHT", defaults.viewport_height),
            navigation_timeout_ms=_int("NAVIGATION_TIMEOUT_MS", defaults.navigation_timeout_ms),
            result_timeout_ms=_int("RESULT_TIMEOUT_MS", defaults.result_timeout_ms),
            disclaimer_timeout_ms=_int("DISCLAIMER_TIMEOUT_MS", defaults.disclaimer_timeout_ms),
            typing_delay_ms=_int("TYPING_DELAY_MS", defaults.typing_delay_ms),
            suggestion_settle_ms=_int("SUGGESTION_SETTLE_MS", defaults.suggestion_settle_ms),
            poll_attempts=_int("POLL_ATTEMPTS", defaults.poll_attempts),
            poll_interval_ms=_int("POLL_INTERVAL_MS", defaults.poll_interval_ms),
            nominatim_url=_str("NOMINATIM_URL", defaults.nominatim_url),
            represent_url=_str("REPRESENT_URL", defaults.represent_url).rstrip("/"),
            boundary_set=_str("BOUNDARY_SET", defaults.boundary_set),
            http_timeout_s=_float("HTTP_TIMEOUT_S", defaults.http_timeout_s),
            user_agent=_str("USER_AGENT", defaults.user_agent),
            cors_origins=cors_origins,
            log_level=_str("LOG_LEVEL", defaults.log_level).upper(),
        )
