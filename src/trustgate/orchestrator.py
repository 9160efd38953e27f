"""Validation orchestrator: the library's entry point.

A pipeline is a named, ordered list of validator steps. Steps run in order
and the first rejection is returned; later steps are never evaluated.
Pipelines are configuration, so adding a new submission type means adding
an entry to the pipeline table rather than touching any validator.

Usage:
    async with ValidationOrchestrator() as trust:
        outcome = await trust.validate("social_post", text, identity=client_ip)
        if not outcome.accepted:
            ...  # map outcome.code / outcome.message to a form error
"""

import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from trustgate.cache import InMemoryTTLCache, TTLCache
from trustgate.config import (
    ConfigurationError,
    ContentOptions,
    EmailOptions,
    FormIntegrityOptions,
    RATE_LIMIT_PRESETS,
    RateLimitOptions,
    TrustgateConfig,
    UnknownPipelineError,
)
from trustgate.content import ContentRiskAnalyzer
from trustgate.email_validator import EmailTrustValidator
from trustgate.form_integrity import FormIntegrityChecker, sanitize_input
from trustgate.institutional import InstitutionalIdentityClassifier
from trustgate.phone import PhoneNumberValidator
from trustgate.rate_limiter import SubmissionRateLimiter
from trustgate.reputation import ReputationClient, ReputationLookup
from trustgate.schemas import (
    ACCEPTED,
    ContentMode,
    FailureCode,
    Purpose,
    ValidationOutcome,
    ValidationRequest,
)
from trustgate.user_agent import UserAgentAuthenticityChecker

logger = logging.getLogger("trustgate-orchestrator")


# =============================================================================
# Pipeline Configuration
# =============================================================================


@dataclass(frozen=True)
class PipelineSpec:
    """Ordered validator steps for one kind of submission."""

    purpose: Purpose
    steps: tuple[str, ...]


DEFAULT_PIPELINES: dict[str, PipelineSpec] = {
    "content": PipelineSpec(Purpose.CONTENT, ("content",)),
    "social_post": PipelineSpec(Purpose.CONTENT, ("rate_limit", "content")),
    "email": PipelineSpec(Purpose.EMAIL, ("email",)),
    "registration_email": PipelineSpec(Purpose.EMAIL, ("rate_limit", "email")),
    "institutional-email": PipelineSpec(
        Purpose.INSTITUTIONAL_EMAIL, ("email", "institutional")
    ),
    "phone": PipelineSpec(Purpose.PHONE, ("phone",)),
    "user-agent": PipelineSpec(Purpose.USER_AGENT, ("user_agent",)),
    "form": PipelineSpec(Purpose.FORM, ("form_integrity", "rate_limit")),
}


class ValidationOptions(BaseModel):
    """Per-call options, parsed from the caller's plain mapping."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    # Content
    content_mode: ContentMode = ContentMode.MODERATE
    max_urls: int = Field(default=2, ge=0)
    allow_html: bool = True

    # Email
    allow_disposable: bool = False
    check_mx: bool = True
    suggest_typos: bool = True
    require_institutional: bool = False

    # Rate limiting (explicit values override the preset)
    rate_limit_preset: str | None = None
    max_attempts: int | None = Field(default=None, ge=1)
    decay_seconds: int | None = Field(default=None, ge=1)
    detect_suspicious_activity: bool = True

    # Form integrity
    min_fill_seconds: float | None = Field(default=None, ge=0)

    @field_validator("rate_limit_preset")
    @classmethod
    def _known_preset(cls, value: str | None) -> str | None:
        if value is not None and value not in RATE_LIMIT_PRESETS:
            raise ValueError(f"unknown rate limit preset {value!r}")
        return value

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> "ValidationOptions":
        """Parse a caller-supplied mapping, raising ConfigurationError if invalid."""
        try:
            return cls(**dict(options or {}))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid validation options: {e}") from e

    def content_options(self) -> ContentOptions:
        return ContentOptions(
            mode=self.content_mode, max_urls=self.max_urls, allow_html=self.allow_html
        )

    def email_options(self) -> EmailOptions:
        return EmailOptions(
            allow_disposable=self.allow_disposable,
            check_mx=self.check_mx,
            suggest_typos=self.suggest_typos,
        )

    def rate_limit_options(self, default_preset: str) -> RateLimitOptions:
        base = RateLimitOptions.preset(self.rate_limit_preset or default_preset)
        return RateLimitOptions(
            max_attempts=self.max_attempts or base.max_attempts,
            decay_seconds=self.decay_seconds or base.decay_seconds,
            detect_suspicious_activity=self.detect_suspicious_activity,
        )


StepFn = Callable[[str, ValidationRequest, ValidationOptions], Awaitable[ValidationOutcome]]


# =============================================================================
# Orchestrator
# =============================================================================


class ValidationOrchestrator:
    """Runs configured validator pipelines over submitted values."""

    def __init__(
        self,
        config: TrustgateConfig | None = None,
        cache: TTLCache | None = None,
        reputation: ReputationLookup | None = None,
        pipelines: Mapping[str, PipelineSpec] | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the orchestrator and its validators.

        Args:
            config: Process settings. If not provided, loads from environment.
            cache: Shared TTL cache for counters and lookups. Defaults to in-memory.
            reputation: Disposable/MX lookup source. Defaults to ReputationClient.
            pipelines: Pipeline table. Defaults to DEFAULT_PIPELINES.
            clock: Unix-time source for rate limiting.
        """
        self.config = config or TrustgateConfig.from_env()
        self.cache = cache or InMemoryTTLCache(clock)
        self._owns_reputation = reputation is None
        self.reputation = reputation or ReputationClient(self.config, self.cache)
        self.pipelines: dict[str, PipelineSpec] = dict(pipelines or DEFAULT_PIPELINES)

        self.content_analyzer = ContentRiskAnalyzer()
        self.email_validator = EmailTrustValidator(self.reputation)
        self.phone_validator = PhoneNumberValidator()
        self.user_agent_checker = UserAgentAuthenticityChecker()
        self.institutional_classifier = InstitutionalIdentityClassifier()
        self.form_checker = FormIntegrityChecker()
        self.rate_limiter = SubmissionRateLimiter(self.cache, clock)

        self._steps: dict[str, StepFn] = {
            "rate_limit": self._rate_limit_step,
            "content": self._content_step,
            "email": self._email_step,
            "institutional": self._institutional_step,
            "phone": self._phone_step,
            "user_agent": self._user_agent_step,
            "form_integrity": self._form_integrity_step,
        }

        for name, spec in self.pipelines.items():
            self._check_steps(name, spec.steps)

    async def __aenter__(self) -> "ValidationOrchestrator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release network clients created by this orchestrator."""
        if self._owns_reputation and isinstance(self.reputation, ReputationClient):
            await self.reputation.aclose()

    def _check_steps(self, pipeline: str, steps: tuple[str, ...]) -> None:
        unknown = [s for s in steps if s not in self._steps]
        if unknown:
            raise ConfigurationError(
                f"Pipeline {pipeline!r} uses unknown steps: {', '.join(unknown)}"
            )

    def register_pipeline(self, name: str, spec: PipelineSpec) -> None:
        """Add or replace a pipeline."""
        self._check_steps(name, spec.steps)
        self.pipelines[name] = spec

    def steps_for(self, pipeline: str, options: ValidationOptions) -> tuple[str, ...]:
        """Resolve the ordered steps a pipeline runs with these options."""
        try:
            steps = self.pipelines[pipeline].steps
        except KeyError:
            raise UnknownPipelineError(f"Unknown validation pipeline: {pipeline!r}") from None
        if options.require_institutional and "email" in steps and "institutional" not in steps:
            index = steps.index("email") + 1
            steps = steps[:index] + ("institutional",) + steps[index:]
        return steps

    # -- public API ----------------------------------------------------------

    async def validate(
        self,
        purpose: str,
        value: str,
        identity: str,
        options: Mapping[str, Any] | None = None,
        field: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> ValidationOutcome:
        """Validate one submitted value.

        Args:
            purpose: Pipeline name, e.g. "social_post" or "registration_email".
            value: Raw field value. Non-string values are converted with str().
            identity: User id or client IP, used for rate limiting.
            options: Plain mapping of ValidationOptions fields.
            field: Form field name, for logging. Defaults to the pipeline name.
            metadata: Extra inputs (e.g. honeypot value, form start time).

        Returns:
            The first rejection, or an accepting outcome.
        """
        parsed = ValidationOptions.from_mapping(options)
        if purpose not in self.pipelines:
            raise UnknownPipelineError(f"Unknown validation pipeline: {purpose!r}")

        request = ValidationRequest(
            field=field or purpose,
            value=sanitize_input("" if value is None else str(value)),
            identity=identity,
            purpose=self.pipelines[purpose].purpose,
            metadata=dict(metadata or {}),
        )
        return await self.run(purpose, request, parsed)

    async def run(
        self,
        pipeline: str,
        request: ValidationRequest,
        options: ValidationOptions | None = None,
    ) -> ValidationOutcome:
        """Run a pipeline's steps in order, stopping at the first rejection."""
        options = options or ValidationOptions()
        for name in self.steps_for(pipeline, options):
            try:
                outcome = await self._steps[name](pipeline, request, options)
            except Exception:
                logger.exception(
                    f"Validator step {name!r} failed in pipeline {pipeline!r} "
                    f"for field {request.field!r}"
                )
                return ValidationOutcome.reject(
                    FailureCode.INTERNAL_ERROR,
                    "We could not validate this submission. Please try again.",
                )
            if not outcome.accepted:
                logger.info(
                    f"Rejected {request.field!r} in {pipeline!r} at step {name!r}: "
                    f"{outcome.code.value}"
                )
                return outcome
        return ACCEPTED

    # -- steps ---------------------------------------------------------------

    async def _rate_limit_step(
        self, pipeline: str, request: ValidationRequest, options: ValidationOptions
    ) -> ValidationOutcome:
        return await self.rate_limiter.check_and_record(
            request.identity,
            pipeline,
            options.rate_limit_options(self.config.rate_limit_preset),
        )

    async def _content_step(
        self, pipeline: str, request: ValidationRequest, options: ValidationOptions
    ) -> ValidationOutcome:
        return self.content_analyzer.analyze(request.value, options.content_options())

    async def _email_step(
        self, pipeline: str, request: ValidationRequest, options: ValidationOptions
    ) -> ValidationOutcome:
        return await self.email_validator.validate(request.value, options.email_options())

    async def _institutional_step(
        self, pipeline: str, request: ValidationRequest, options: ValidationOptions
    ) -> ValidationOutcome:
        return self.institutional_classifier.classify(request.value)

    async def _phone_step(
        self, pipeline: str, request: ValidationRequest, options: ValidationOptions
    ) -> ValidationOutcome:
        return self.phone_validator.validate(request.value)

    async def _user_agent_step(
        self, pipeline: str, request: ValidationRequest, options: ValidationOptions
    ) -> ValidationOutcome:
        return self.user_agent_checker.validate(request.value)

    async def _form_integrity_step(
        self, pipeline: str, request: ValidationRequest, options: ValidationOptions
    ) -> ValidationOutcome:
        min_fill = options.min_fill_seconds
        if min_fill is None:
            min_fill = self.config.min_form_fill_seconds
        return self.form_checker.check(
            request.metadata.get(self.config.honeypot_field),
            request.metadata.get("form_started_at"),
            now=request.timestamp,
            options=FormIntegrityOptions(min_fill_seconds=min_fill),
        )
