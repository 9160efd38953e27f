"""Tests for pipeline orchestration."""

from datetime import datetime, timedelta, timezone

import pytest
from trustgate.config import ConfigurationError, UnknownPipelineError
from trustgate.orchestrator import PipelineSpec, ValidationOptions, ValidationOrchestrator
from trustgate.schemas import FailureCode, Purpose

CHROME = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@pytest.fixture
def trust(config, cache, reputation, clock) -> ValidationOrchestrator:
    return ValidationOrchestrator(
        config=config, cache=cache, reputation=reputation, clock=clock
    )


# =============================================================================
# Options
# =============================================================================


class TestValidationOptions:
    """Tests for option parsing."""

    def test_defaults(self):
        options = ValidationOptions.from_mapping(None)
        assert options.content_options().max_urls == 2
        assert options.email_options().check_mx is True
        rate = options.rate_limit_options("default")
        assert (rate.max_attempts, rate.decay_seconds) == (5, 3600)

    def test_explicit_values_override_preset(self):
        options = ValidationOptions.from_mapping(
            {"rate_limit_preset": "strict", "max_attempts": 4}
        )
        rate = options.rate_limit_options("default")
        assert (rate.max_attempts, rate.decay_seconds) == (4, 7200)

    @pytest.mark.parametrize(
        "mapping",
        [
            {"content_mode": "paranoid"},
            {"max_urls": -1},
            {"max_attempts": 0},
            {"rate_limit_preset": "extreme"},
            {"no_such_option": True},
        ],
    )
    def test_invalid_options(self, mapping):
        with pytest.raises(ConfigurationError):
            ValidationOptions.from_mapping(mapping)


# =============================================================================
# Pipelines
# =============================================================================


class TestPipelines:
    """Tests for the default pipeline table."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "pipeline,value",
        [
            ("content", "Looking forward to the reunion next month."),
            ("email", "jane@example.com"),
            ("institutional-email", "jane@stanford.edu"),
            ("phone", "+14155551234"),
            ("user-agent", CHROME),
        ],
    )
    async def test_accepts_good_values(self, trust, pipeline, value):
        outcome = await trust.validate(pipeline, value, identity="10.0.0.1")
        assert outcome.accepted is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "pipeline,value,code",
        [
            ("content", "<script>alert(1)</script>", FailureCode.XSS_SUSPECTED),
            ("email", "a@b", FailureCode.INVALID_DOMAIN_FORMAT),
            ("email", "user@gmial.com", FailureCode.POSSIBLE_TYPO),
            ("institutional-email", "jane@gmail.com", FailureCode.PERSONAL_EMAIL_DOMAIN),
            ("phone", "1234567890", FailureCode.TEST_OR_FAKE_NUMBER),
            ("user-agent", "curl/7.68.0", FailureCode.AUTOMATED_CLIENT_SUSPECTED),
        ],
    )
    async def test_rejects_bad_values(self, trust, pipeline, value, code):
        outcome = await trust.validate(pipeline, value, identity="10.0.0.1")
        assert outcome.code == code

    @pytest.mark.asyncio
    async def test_email_checked_before_institutional(self, trust):
        """A disposable address fails on the email step, not the classifier."""
        outcome = await trust.validate(
            "institutional-email", "x@mailinator.com", identity="u1"
        )
        assert outcome.code == FailureCode.DISPOSABLE_EMAIL

    @pytest.mark.asyncio
    async def test_value_is_sanitized(self, trust):
        outcome = await trust.validate("phone", "  +14155551234\0 ", identity="u1")
        assert outcome.accepted is True

    @pytest.mark.asyncio
    async def test_non_string_value_is_coerced(self, trust):
        """A loosely typed form layer may pass numbers; they are validated as text."""
        outcome = await trust.validate("phone", 14155551234, identity="u1")
        assert outcome.accepted is True

    @pytest.mark.asyncio
    async def test_none_value_is_blank(self, trust):
        outcome = await trust.validate("content", None, identity="u1")
        assert outcome.accepted is True

    @pytest.mark.asyncio
    async def test_unknown_pipeline(self, trust):
        with pytest.raises(UnknownPipelineError):
            await trust.validate("fax", "123", identity="u1")

    @pytest.mark.asyncio
    async def test_invalid_options_raise(self, trust):
        with pytest.raises(ConfigurationError):
            await trust.validate("content", "hi", identity="u1", options={"max_urls": "many"})


class TestRateLimitedPipelines:
    """Pipelines that start with a rate limit step."""

    @pytest.mark.asyncio
    async def test_rate_limit_runs_first(self, trust):
        """Once over budget, content is not even analyzed."""
        options = {"max_attempts": 1, "detect_suspicious_activity": False}
        first = await trust.validate(
            "social_post", "Nice photo from the trip!", identity="u1", options=options
        )
        assert first.accepted is True
        second = await trust.validate(
            "social_post", "<script>alert(1)</script>", identity="u1", options=options
        )
        assert second.code == FailureCode.RATE_LIMITED
        assert second.retry_after == 3600

    @pytest.mark.asyncio
    async def test_budget_is_per_pipeline(self, trust):
        """The same identity has separate budgets per pipeline."""
        options = {"max_attempts": 1, "detect_suspicious_activity": False}
        await trust.validate("social_post", "First post here", identity="u1", options=options)
        outcome = await trust.validate(
            "registration_email", "jane@example.com", identity="u1", options=options
        )
        assert outcome.accepted is True

    @pytest.mark.asyncio
    async def test_burst_is_detected(self, trust, clock):
        for _ in range(2):
            await trust.validate("social_post", "A perfectly fine post", identity="u1")
            clock.advance(40)
        outcome = await trust.validate("social_post", "A perfectly fine post", identity="u1")
        assert outcome.code == FailureCode.SUSPICIOUS_SUBMISSION_PATTERN


class TestInstitutionalOption:
    """require_institutional adds the classifier after the email step."""

    def test_steps_for(self, trust):
        options = ValidationOptions(require_institutional=True)
        assert trust.steps_for("registration_email", options) == (
            "rate_limit",
            "email",
            "institutional",
        )
        assert trust.steps_for("institutional-email", options) == ("email", "institutional")

    @pytest.mark.asyncio
    async def test_rejects_consumer_domain(self, trust):
        outcome = await trust.validate(
            "email", "jane@gmail.com", identity="u1", options={"require_institutional": True}
        )
        assert outcome.code == FailureCode.PERSONAL_EMAIL_DOMAIN


class TestFormPipeline:
    """Honeypot and fill time via metadata."""

    @pytest.mark.asyncio
    async def test_honeypot(self, trust):
        outcome = await trust.validate(
            "form", "", identity="u1", metadata={"website": "http://spam.example"}
        )
        assert outcome.code == FailureCode.HONEYPOT_TRIGGERED

    @pytest.mark.asyncio
    async def test_too_fast(self, trust):
        started = datetime.now(timezone.utc)
        outcome = await trust.validate(
            "form", "", identity="u1", metadata={"form_started_at": started}
        )
        assert outcome.code == FailureCode.SUBMITTED_TOO_FAST

    @pytest.mark.asyncio
    async def test_human_submission(self, trust):
        started = datetime.now(timezone.utc) - timedelta(seconds=30)
        outcome = await trust.validate(
            "form",
            "",
            identity="u1",
            metadata={"website": "", "form_started_at": started},
            options={"rate_limit_preset": "form_submission"},
        )
        assert outcome.accepted is True


# =============================================================================
# Extension and Failure Handling
# =============================================================================


class TestRegistration:
    """Custom pipelines."""

    @pytest.mark.asyncio
    async def test_register_pipeline(self, trust):
        trust.register_pipeline(
            "contact_phone", PipelineSpec(Purpose.PHONE, ("rate_limit", "phone"))
        )
        outcome = await trust.validate("contact_phone", "2468024", identity="u1")
        assert outcome.code == FailureCode.UNRECOGNIZED_FORMAT

    def test_unknown_step_rejected(self, trust):
        with pytest.raises(ConfigurationError):
            trust.register_pipeline("bad", PipelineSpec(Purpose.FORM, ("captcha",)))

    def test_unknown_step_in_table(self, config, cache, reputation):
        with pytest.raises(ConfigurationError):
            ValidationOrchestrator(
                config=config,
                cache=cache,
                reputation=reputation,
                pipelines={"bad": PipelineSpec(Purpose.CONTENT, ("nope",))},
            )


class TestStepFailure:
    """An exception inside a validator becomes internal_error."""

    @pytest.mark.asyncio
    async def test_internal_error(self, trust):
        class Boom:
            def validate(self, value):
                raise RuntimeError("boom")

        trust.phone_validator = Boom()
        outcome = await trust.validate("phone", "+14155551234", identity="u1")
        assert outcome.code == FailureCode.INTERNAL_ERROR
