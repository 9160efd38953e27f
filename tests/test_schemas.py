"""Tests for request and outcome schemas."""

import pytest
from pydantic import ValidationError
from trustgate.schemas import (
    ACCEPTED,
    FailureCategory,
    FailureCode,
    Purpose,
    ValidationOutcome,
    ValidationRequest,
)


class TestValidationOutcome:
    """Tests for outcome consistency."""

    def test_accept(self):
        outcome = ValidationOutcome.accept()
        assert outcome.accepted is True
        assert outcome.code is None
        assert outcome.category is None

    def test_reject(self):
        outcome = ValidationOutcome.reject(
            FailureCode.RATE_LIMITED, "slow down", retry_after=30
        )
        assert outcome.accepted is False
        assert outcome.retry_after == 30
        assert outcome.category == FailureCategory.RATE

    def test_accepted_with_code_is_invalid(self):
        with pytest.raises(ValidationError):
            ValidationOutcome(accepted=True, code=FailureCode.TOO_SHORT)

    def test_rejected_without_code_is_invalid(self):
        with pytest.raises(ValidationError):
            ValidationOutcome(accepted=False)

    def test_outcome_is_immutable(self):
        with pytest.raises(ValidationError):
            ACCEPTED.accepted = False

    def test_serializes_code_as_string(self):
        outcome = ValidationOutcome.reject(FailureCode.POSSIBLE_TYPO, "typo", "gmail.com")
        data = outcome.model_dump(mode="json")
        assert data["code"] == "possible_typo"
        assert data["suggestion"] == "gmail.com"


class TestFailureCode:
    """Every code belongs to exactly one category."""

    @pytest.mark.parametrize("code", list(FailureCode))
    def test_every_code_has_category(self, code):
        assert isinstance(code.category, FailureCategory)

    @pytest.mark.parametrize(
        "code,category",
        [
            (FailureCode.XSS_SUSPECTED, FailureCategory.SECURITY),
            (FailureCode.DISPOSABLE_EMAIL, FailureCategory.IDENTITY_TRUST),
            (FailureCode.SEQUENTIAL_DIGITS, FailureCategory.FORMAT),
            (FailureCode.HONEYPOT_TRIGGERED, FailureCategory.INTEGRITY),
            (FailureCode.SPAM_CONTENT, FailureCategory.CONTENT_QUALITY),
        ],
    )
    def test_known_categories(self, code, category):
        assert code.category == category


class TestValidationRequest:
    """Tests for request construction."""

    def test_defaults(self):
        request = ValidationRequest(
            field="email", value="a@b.com", identity="10.0.0.1", purpose=Purpose.EMAIL
        )
        assert request.metadata == {}
        assert request.timestamp.tzinfo is not None

    def test_purpose_from_string(self):
        request = ValidationRequest(
            field="ua", value="x", identity="u1", purpose="user-agent"
        )
        assert request.purpose == Purpose.USER_AGENT
