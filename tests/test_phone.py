"""Tests for phone number plausibility."""

import pytest
from trustgate.phone import PhoneNumberValidator, normalize_phone
from trustgate.schemas import FailureCode


@pytest.fixture
def validator() -> PhoneNumberValidator:
    return PhoneNumberValidator()


class TestNormalize:
    """Tests for normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("+1 (415) 555-1234", "+14155551234"),
            ("415.555.1234", "4155551234"),
            ("  +44 20 7123 4567 ", "+442071234567"),
            ("tel: 0800-123", "0800123"),
            ("", ""),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_phone(raw) == expected


# =============================================================================
# Positive Shapes
# =============================================================================


class TestAcceptedShapes:
    """Numbers accepted by a known shape."""

    @pytest.mark.parametrize(
        "raw",
        [
            "+14155551234",
            "+442071234567",
            "(415) 555-1234",
            "1-415-555-1234",
        ],
    )
    def test_e164_and_north_american(self, validator, raw):
        assert validator.validate(raw).accepted is True

    @pytest.mark.parametrize(
        "raw,country",
        [
            ("07911 123456", "GB"),
            ("0151 23456789", "DE"),
            ("33 6 12 34 56 78", "FR"),
            ("91 98765 43210", "IN"),
            ("86 138 1234 5678", "CN"),
            ("61 412 345 678", "AU"),
        ],
    )
    def test_country_patterns(self, validator, raw, country):
        """Numbers written without a leading + match their country pattern."""
        assert validator.match_country(normalize_phone(raw)) == country
        assert validator.validate(raw).accepted is True


# =============================================================================
# Red Flags
# =============================================================================


class TestRejections:
    """Numbers with no positive shape get a specific reason."""

    def test_too_short(self, validator):
        assert validator.validate("12345").code == FailureCode.TOO_SHORT

    def test_empty_is_too_short(self, validator):
        assert validator.validate("").code == FailureCode.TOO_SHORT

    def test_too_long(self, validator):
        assert validator.validate("1234567890123456").code == FailureCode.TOO_LONG

    @pytest.mark.parametrize("digit", "0123456789")
    def test_ten_identical_digits(self, validator, digit):
        """Ten identical digits never match a shape."""
        assert validator.validate(digit * 10).code == FailureCode.REPEATED_DIGIT

    def test_repeated_digit_with_plus(self, validator):
        assert validator.validate("+1111111111").code == FailureCode.REPEATED_DIGIT

    @pytest.mark.parametrize("raw", ["1234567890", "9876543210"])
    def test_fake_sequences(self, validator, raw):
        assert validator.validate(raw).code == FailureCode.TEST_OR_FAKE_NUMBER

    def test_six_repeated_prefix(self, validator):
        assert validator.validate("2222227").code == FailureCode.TEST_OR_FAKE_NUMBER

    def test_sequential_digits(self, validator):
        assert validator.validate("3456789").code == FailureCode.SEQUENTIAL_DIGITS

    def test_descending_sequence(self, validator):
        assert validator.validate("6543217").code == FailureCode.SEQUENTIAL_DIGITS

    def test_emergency_number(self, validator):
        assert validator.validate("2911000").code == FailureCode.EMERGENCY_NUMBER

    def test_unrecognized(self, validator):
        assert validator.validate("2468024").code == FailureCode.UNRECOGNIZED_FORMAT

    def test_idempotent(self, validator):
        """No hidden state between calls."""
        assert validator.validate("2468024") == validator.validate("2468024")
