"""Pydantic schemas for the input trust pipeline.

Requests and outcomes are immutable: a ValidationRequest is built once per
call and a ValidationOutcome is never mutated after a validator returns it.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# =============================================================================
# Enums
# =============================================================================


class Purpose(str, Enum):
    """What kind of value is being submitted."""

    CONTENT = "content"
    EMAIL = "email"
    PHONE = "phone"
    INSTITUTIONAL_EMAIL = "institutional-email"
    USER_AGENT = "user-agent"
    FORM = "form"


class ContentMode(str, Enum):
    """How aggressively free text is filtered."""

    NONE = "none"
    MODERATE = "moderate"
    STRICT = "strict"


class FailureCategory(str, Enum):
    """Broad family a failure code belongs to."""

    CONTENT_QUALITY = "content_quality"
    SECURITY = "security"
    IDENTITY_TRUST = "identity_trust"
    RATE = "rate"
    FORMAT = "format"
    INTEGRITY = "integrity"
    INTERNAL = "internal"


class FailureCode(str, Enum):
    """Stable machine-readable rejection codes."""

    # Content quality
    PROFANE_CONTENT = "profane_content"
    SPAM_CONTENT = "spam_content"
    SUSPICIOUS_PATTERN = "suspicious_pattern"
    TOO_MANY_URLS = "too_many_urls"
    HTML_NOT_ALLOWED = "html_not_allowed"
    LOW_QUALITY_CONTENT = "low_quality_content"

    # Security
    XSS_SUSPECTED = "xss_suspected"
    SQL_INJECTION_SUSPECTED = "sql_injection_suspected"
    MALICIOUS_CHARACTERS = "malicious_characters"

    # Identity trust
    DISPOSABLE_EMAIL = "disposable_email"
    POSSIBLE_TYPO = "possible_typo"
    NO_MAIL_EXCHANGER = "no_mail_exchanger"
    INVALID_DOMAIN_FORMAT = "invalid_domain_format"
    PERSONAL_EMAIL_DOMAIN = "personal_email_domain"
    NOT_INSTITUTIONAL_DOMAIN = "not_institutional_domain"
    MISSING_CLIENT_IDENTITY = "missing_client_identity"
    AUTOMATED_CLIENT_SUSPECTED = "automated_client_suspected"
    NON_BROWSER_CLIENT = "non_browser_client"
    FAKE_CLIENT_IDENTITY = "fake_client_identity"

    # Rate
    RATE_LIMITED = "rate_limited"
    SUSPICIOUS_SUBMISSION_PATTERN = "suspicious_submission_pattern"

    # Format
    MALFORMED_EMAIL = "malformed_email"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    REPEATED_DIGIT = "repeated_digit"
    TEST_OR_FAKE_NUMBER = "test_or_fake_number"
    SEQUENTIAL_DIGITS = "sequential_digits"
    EMERGENCY_NUMBER = "emergency_number"
    UNRECOGNIZED_FORMAT = "unrecognized_format"

    # Form integrity
    HONEYPOT_TRIGGERED = "honeypot_triggered"
    SUBMITTED_TOO_FAST = "submitted_too_fast"

    # Internal
    INTERNAL_ERROR = "internal_error"

    @property
    def category(self) -> FailureCategory:
        """Family this code belongs to."""
        return _CATEGORIES[self]


_CATEGORIES: dict[FailureCode, FailureCategory] = {
    FailureCode.PROFANE_CONTENT: FailureCategory.CONTENT_QUALITY,
    FailureCode.SPAM_CONTENT: FailureCategory.CONTENT_QUALITY,
    FailureCode.SUSPICIOUS_PATTERN: FailureCategory.CONTENT_QUALITY,
    FailureCode.TOO_MANY_URLS: FailureCategory.CONTENT_QUALITY,
    FailureCode.HTML_NOT_ALLOWED: FailureCategory.CONTENT_QUALITY,
    FailureCode.LOW_QUALITY_CONTENT: FailureCategory.CONTENT_QUALITY,
    FailureCode.XSS_SUSPECTED: FailureCategory.SECURITY,
    FailureCode.SQL_INJECTION_SUSPECTED: FailureCategory.SECURITY,
    FailureCode.MALICIOUS_CHARACTERS: FailureCategory.SECURITY,
    FailureCode.DISPOSABLE_EMAIL: FailureCategory.IDENTITY_TRUST,
    FailureCode.POSSIBLE_TYPO: FailureCategory.IDENTITY_TRUST,
    FailureCode.NO_MAIL_EXCHANGER: FailureCategory.IDENTITY_TRUST,
    FailureCode.INVALID_DOMAIN_FORMAT: FailureCategory.IDENTITY_TRUST,
    FailureCode.PERSONAL_EMAIL_DOMAIN: FailureCategory.IDENTITY_TRUST,
    FailureCode.NOT_INSTITUTIONAL_DOMAIN: FailureCategory.IDENTITY_TRUST,
    FailureCode.MISSING_CLIENT_IDENTITY: FailureCategory.IDENTITY_TRUST,
    FailureCode.AUTOMATED_CLIENT_SUSPECTED: FailureCategory.IDENTITY_TRUST,
    FailureCode.NON_BROWSER_CLIENT: FailureCategory.IDENTITY_TRUST,
    FailureCode.FAKE_CLIENT_IDENTITY: FailureCategory.IDENTITY_TRUST,
    FailureCode.RATE_LIMITED: FailureCategory.RATE,
    FailureCode.SUSPICIOUS_SUBMISSION_PATTERN: FailureCategory.RATE,
    FailureCode.MALFORMED_EMAIL: FailureCategory.FORMAT,
    FailureCode.TOO_SHORT: FailureCategory.FORMAT,
    FailureCode.TOO_LONG: FailureCategory.FORMAT,
    FailureCode.REPEATED_DIGIT: FailureCategory.FORMAT,
    FailureCode.TEST_OR_FAKE_NUMBER: FailureCategory.FORMAT,
    FailureCode.SEQUENTIAL_DIGITS: FailureCategory.FORMAT,
    FailureCode.EMERGENCY_NUMBER: FailureCategory.FORMAT,
    FailureCode.UNRECOGNIZED_FORMAT: FailureCategory.FORMAT,
    FailureCode.HONEYPOT_TRIGGERED: FailureCategory.INTEGRITY,
    FailureCode.SUBMITTED_TOO_FAST: FailureCategory.INTEGRITY,
    FailureCode.INTERNAL_ERROR: FailureCategory.INTERNAL,
}


# =============================================================================
# Request / Outcome
# =============================================================================


class ValidationRequest(BaseModel):
    """A single value submitted for validation.

    Created per call by the orchestrator. `identity` is the user id or
    client IP used to key rate counters.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    value: str
    identity: str
    purpose: Purpose
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = Field(default_factory=dict)


class ValidationOutcome(BaseModel):
    """Result of a validator or of a whole pipeline.

    Exactly one of `accepted=True` or `code` is set.
    """

    model_config = ConfigDict(frozen=True)

    accepted: bool
    code: FailureCode | None = None
    message: str = ""
    suggestion: str | None = None  # e.g. corrected email domain
    retry_after: int | None = None  # seconds, for rate_limited

    @model_validator(mode="after")
    def _check_consistency(self) -> "ValidationOutcome":
        if self.accepted and self.code is not None:
            raise ValueError("accepted outcome cannot carry a failure code")
        if not self.accepted and self.code is None:
            raise ValueError("rejected outcome requires a failure code")
        return self

    @classmethod
    def accept(cls, message: str = "") -> "ValidationOutcome":
        """Build an accepting outcome."""
        return cls(accepted=True, message=message)

    @classmethod
    def reject(
        cls,
        code: FailureCode,
        message: str,
        suggestion: str | None = None,
        retry_after: int | None = None,
    ) -> "ValidationOutcome":
        """Build a rejecting outcome."""
        return cls(
            accepted=False,
            code=code,
            message=message,
            suggestion=suggestion,
            retry_after=retry_after,
        )

    @property
    def category(self) -> FailureCategory | None:
        """Failure family, or None when accepted."""
        return self.code.category if self.code else None


# Shared accepting outcome; outcomes are frozen so one instance is enough.
ACCEPTED = ValidationOutcome.accept()
