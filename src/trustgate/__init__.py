"""Input trust and abuse-prevention validators.

Provides fail-fast validation at submission boundaries:
- Content risk analysis (profanity, spam, XSS, SQL injection, low quality)
- Email trust (disposable domains, typos, MX records)
- Phone number plausibility
- Submission rate limiting and suspicious-activity detection
- User agent authenticity
- Institutional email classification
- Form integrity (honeypot, fill time)
"""

from trustgate.cache import InMemoryTTLCache, TTLCache
from trustgate.config import (
    RATE_LIMIT_PRESETS,
    ConfigurationError,
    ContentOptions,
    EmailOptions,
    FormIntegrityOptions,
    RateLimitOptions,
    TrustgateConfig,
    TrustgateError,
    UnknownPipelineError,
)
from trustgate.content import ContentRiskAnalyzer
from trustgate.email_validator import EmailTrustValidator
from trustgate.form_integrity import FormIntegrityChecker, sanitize_input
from trustgate.institutional import InstitutionalIdentityClassifier
from trustgate.orchestrator import (
    DEFAULT_PIPELINES,
    PipelineSpec,
    ValidationOptions,
    ValidationOrchestrator,
)
from trustgate.phone import PhoneNumberValidator
from trustgate.rate_limiter import SubmissionRateLimiter
from trustgate.reputation import ReputationClient, ReputationLookup
from trustgate.schemas import (
    ContentMode,
    FailureCategory,
    FailureCode,
    Purpose,
    ValidationOutcome,
    ValidationRequest,
)
from trustgate.user_agent import UserAgentAuthenticityChecker

__all__ = [
    "DEFAULT_PIPELINES",
    "RATE_LIMIT_PRESETS",
    "ConfigurationError",
    "ContentMode",
    "ContentOptions",
    "ContentRiskAnalyzer",
    "EmailOptions",
    "EmailTrustValidator",
    "FailureCategory",
    "FailureCode",
    "FormIntegrityChecker",
    "FormIntegrityOptions",
    "InMemoryTTLCache",
    "InstitutionalIdentityClassifier",
    "PhoneNumberValidator",
    "PipelineSpec",
    "Purpose",
    "RateLimitOptions",
    "ReputationClient",
    "ReputationLookup",
    "SubmissionRateLimiter",
    "TTLCache",
    "TrustgateConfig",
    "TrustgateError",
    "UnknownPipelineError",
    "UserAgentAuthenticityChecker",
    "ValidationOptions",
    "ValidationOrchestrator",
    "ValidationOutcome",
    "ValidationRequest",
    "sanitize_input",
]
