"""Trustgate configuration.

Process-level settings are loaded from environment variables (and a
`.env` file when present). Per-call behaviour is passed explicitly as one
of the option dataclasses below so that a validator call is reproducible
independent of where it is made.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from trustgate.schemas import ContentMode

logger = logging.getLogger("trustgate-config")


class TrustgateError(Exception):
    """Base class for errors raised by trustgate itself."""


class ConfigurationError(TrustgateError):
    """Raised when configuration is invalid."""


class UnknownPipelineError(TrustgateError):
    """Raised when a caller names a pipeline that is not configured."""


# =============================================================================
# Per-call Options
# =============================================================================


@dataclass(frozen=True)
class ContentOptions:
    """Options for free-text analysis."""

    mode: ContentMode = ContentMode.MODERATE
    max_urls: int = 2
    allow_html: bool = True


@dataclass(frozen=True)
class EmailOptions:
    """Options for email trust validation."""

    allow_disposable: bool = False
    check_mx: bool = True
    suggest_typos: bool = True


@dataclass(frozen=True)
class RateLimitOptions:
    """Attempt budget for one purpose."""

    max_attempts: int = 5
    decay_seconds: int = 3600
    detect_suspicious_activity: bool = True

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1")
        if self.decay_seconds < 1:
            raise ConfigurationError("decay_seconds must be at least 1")

    @classmethod
    def preset(cls, name: str) -> "RateLimitOptions":
        """Look up a named preset (strict, default, lenient, form_submission)."""
        try:
            max_attempts, decay_seconds = RATE_LIMIT_PRESETS[name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown rate limit preset: {name!r}. "
                f"Expected one of: {', '.join(sorted(RATE_LIMIT_PRESETS))}"
            ) from None
        return cls(max_attempts=max_attempts, decay_seconds=decay_seconds)


# (max_attempts, decay_seconds)
RATE_LIMIT_PRESETS: dict[str, tuple[int, int]] = {
    "strict": (2, 120 * 60),
    "default": (5, 60 * 60),
    "lenient": (10, 30 * 60),
    "form_submission": (10, 60),
}


@dataclass(frozen=True)
class FormIntegrityOptions:
    """Options for honeypot and fill-time checks."""

    min_fill_seconds: float = 3.0


# =============================================================================
# Process Configuration
# =============================================================================


DEFAULT_DISPOSABLE_API_URL = "https://open.kickbox.com/v1/disposable/{domain}"


def _env_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"{key}={raw!r} is not a number, using {default}")
        return default


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{key}={raw!r} is not an integer, using {default}")
        return default


@dataclass
class TrustgateConfig:
    """Process-wide settings shared by all validators."""

    disposable_api_url: str = DEFAULT_DISPOSABLE_API_URL
    lookup_timeout_seconds: float = 5.0
    disposable_cache_ttl: int = 3600
    mx_cache_ttl: int = 1800
    rate_limit_preset: str = "default"
    min_form_fill_seconds: float = 3.0
    honeypot_field: str = "website"

    @classmethod
    def from_env(cls) -> "TrustgateConfig":
        """Load config from environment variables (and `.env`)."""
        load_dotenv()

        api_url = os.getenv("TRUSTGATE_DISPOSABLE_API_URL", DEFAULT_DISPOSABLE_API_URL)
        if "{domain}" not in api_url:
            raise ConfigurationError(
                "TRUSTGATE_DISPOSABLE_API_URL must contain a {domain} placeholder\n"
                f'Example: TRUSTGATE_DISPOSABLE_API_URL="{DEFAULT_DISPOSABLE_API_URL}"'
            )

        preset = os.getenv("TRUSTGATE_RATE_LIMIT_PRESET", "default")
        if preset not in RATE_LIMIT_PRESETS:
            logger.warning(f"Unknown TRUSTGATE_RATE_LIMIT_PRESET {preset!r}, using 'default'")
            preset = "default"

        return cls(
            disposable_api_url=api_url,
            lookup_timeout_seconds=_env_float("TRUSTGATE_LOOKUP_TIMEOUT_SECONDS", 5.0),
            disposable_cache_ttl=_env_int("TRUSTGATE_DISPOSABLE_CACHE_TTL", 3600),
            mx_cache_ttl=_env_int("TRUSTGATE_MX_CACHE_TTL", 1800),
            rate_limit_preset=preset,
            min_form_fill_seconds=_env_float("TRUSTGATE_MIN_FORM_FILL_SECONDS", 3.0),
            honeypot_field=os.getenv("TRUSTGATE_HONEYPOT_FIELD", "website"),
        )
