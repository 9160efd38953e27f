"""Phone number plausibility checks.

A number is accepted as soon as it matches a known shape (E.164, North
American, or one of the country patterns). Numbers that match no shape are
inspected for specific red flags so the caller gets a precise reason.
"""

import re

from trustgate.schemas import ACCEPTED, FailureCode, ValidationOutcome

# A number made of one repeated digit never matches a positive shape.
_NOT_ONE_DIGIT = r"(?!\+?(\d)\1*$)"

E164_PATTERN = re.compile(_NOT_ONE_DIGIT + r"^\+\d{2,15}$")
NANP_PATTERN = re.compile(_NOT_ONE_DIGIT + r"^1?[2-9]\d{2}[2-9]\d{6}$")

# (ISO code, country calling code, national trunk prefix, national significant number)
COUNTRY_SHAPES: tuple[tuple[str, str, str, str], ...] = (
    ("GB", "44", "0", r"7\d{9}|[1-3]\d{8,9}"),
    ("DE", "49", "0", r"1[5-7]\d{8,9}|[2-9]\d{6,10}"),
    ("FR", "33", "0", r"[1-9]\d{8}"),
    ("ES", "34", "", r"[6-9]\d{8}"),
    ("IT", "39", "", r"3\d{8,9}|0\d{5,10}"),
    ("NL", "31", "0", r"6\d{8}|[1-57-9]\d{8}"),
    ("BE", "32", "0", r"4\d{8}|[1-9]\d{7}"),
    ("CH", "41", "0", r"[1-9]\d{8}"),
    ("AT", "43", "0", r"[1-9]\d{3,12}"),
    ("SE", "46", "0", r"7[02369]\d{7}|[1-9]\d{6,8}"),
    ("NO", "47", "", r"[2-9]\d{7}"),
    ("DK", "45", "", r"[2-9]\d{7}"),
    ("FI", "358", "0", r"[1-9]\d{4,11}"),
    ("IE", "353", "0", r"8[35-9]\d{7}|[1-9]\d{6,8}"),
    ("PT", "351", "", r"9[1236]\d{7}|2\d{8}"),
    ("PL", "48", "", r"[4-8]\d{8}"),
    ("CZ", "420", "", r"[2-9]\d{8}"),
    ("GR", "30", "", r"69\d{8}|2\d{9}"),
    ("RU", "7", "8", r"[3-9]\d{9}"),
    ("UA", "380", "0", r"[3-9]\d{8}"),
    ("TR", "90", "0", r"5\d{9}|[2-4]\d{9}"),
    ("IN", "91", "0", r"[6-9]\d{9}"),
    ("PK", "92", "0", r"3\d{9}"),
    ("BD", "880", "0", r"1[3-9]\d{8}"),
    ("CN", "86", "", r"1[3-9]\d{9}"),
    ("JP", "81", "0", r"[789]0\d{8}|[1-9]\d{8}"),
    ("KR", "82", "0", r"1\d{8,9}"),
    ("TW", "886", "0", r"9\d{8}"),
    ("HK", "852", "", r"[5-9]\d{7}"),
    ("SG", "65", "", r"[689]\d{7}"),
    ("MY", "60", "0", r"1\d{8,9}"),
    ("TH", "66", "0", r"[689]\d{8}"),
    ("VN", "84", "0", r"[35789]\d{8}"),
    ("PH", "63", "0", r"9\d{9}"),
    ("ID", "62", "0", r"8\d{8,11}"),
    ("AU", "61", "0", r"4\d{8}|[2378]\d{8}"),
    ("NZ", "64", "0", r"2\d{7,9}"),
    ("ZA", "27", "0", r"[6-8]\d{8}"),
    ("NG", "234", "0", r"[789][01]\d{8}"),
    ("KE", "254", "0", r"[17]\d{8}"),
    ("EG", "20", "0", r"1[0125]\d{8}"),
    ("MA", "212", "0", r"[67]\d{8}"),
    ("IL", "972", "0", r"5\d{8}"),
    ("AE", "971", "0", r"5[024568]\d{7}"),
    ("SA", "966", "0", r"5\d{8}"),
    ("BR", "55", "0", r"[1-9]{2}9?\d{8}"),
    ("MX", "52", "", r"1?\d{10}"),
    ("AR", "54", "0", r"9?\d{10}"),
    ("CL", "56", "", r"9\d{8}"),
    ("CO", "57", "", r"3\d{9}"),
    ("PE", "51", "", r"9\d{8}"),
)


def _compile_shape(calling_code: str, trunk: str, nsn: str) -> re.Pattern[str]:
    prefix = rf"\+?{calling_code}"
    if trunk:
        prefix = rf"(?:{prefix}|{trunk})"
    return re.compile(rf"{_NOT_ONE_DIGIT}^{prefix}(?:{nsn})$")


COUNTRY_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (iso, _compile_shape(code, trunk, nsn)) for iso, code, trunk, nsn in COUNTRY_SHAPES
)

FAKE_PREFIXES = ("123456", "987654", "555555", "000000")
SIX_REPEATED = re.compile(r"^(\d)\1{5}")

ASCENDING = "0123456789"
DESCENDING = "9876543210"

EMERGENCY_NUMBERS = ("911", "999", "112", "000", "110", "119", "118")


def normalize_phone(raw: str) -> str:
    """Keep digits and a leading '+'."""
    stripped = (raw or "").strip()
    digits = re.sub(r"\D", "", stripped)
    return f"+{digits}" if stripped.startswith("+") else digits


class PhoneNumberValidator:
    """Pattern-based phone plausibility validator. Stateless."""

    def __init__(
        self,
        country_patterns: tuple[tuple[str, re.Pattern[str]], ...] = COUNTRY_PATTERNS,
        emergency_numbers: tuple[str, ...] = EMERGENCY_NUMBERS,
    ):
        self.country_patterns = country_patterns
        self.emergency_numbers = emergency_numbers

    def match_country(self, normalized: str) -> str | None:
        """ISO code of the first country pattern matching, if any."""
        for iso, pattern in self.country_patterns:
            if pattern.match(normalized):
                return iso
        return None

    def validate(self, raw: str) -> ValidationOutcome:
        """Validate a raw phone string as typed by the user."""
        normalized = normalize_phone(raw)

        if E164_PATTERN.match(normalized) or NANP_PATTERN.match(normalized):
            return ACCEPTED
        if self.match_country(normalized):
            return ACCEPTED

        digits = normalized.lstrip("+")

        if len(digits) < 7:
            return ValidationOutcome.reject(
                FailureCode.TOO_SHORT, "Phone number is too short."
            )
        if len(digits) > 15:
            return ValidationOutcome.reject(
                FailureCode.TOO_LONG, "Phone number is too long."
            )

        if len(set(digits)) == 1:
            return ValidationOutcome.reject(
                FailureCode.REPEATED_DIGIT,
                "Phone number cannot be a single repeated digit.",
            )

        if digits.startswith(FAKE_PREFIXES) or SIX_REPEATED.match(digits):
            return ValidationOutcome.reject(
                FailureCode.TEST_OR_FAKE_NUMBER,
                "Please enter a real phone number.",
            )

        head = digits[:6]
        if head in ASCENDING or head in DESCENDING:
            return ValidationOutcome.reject(
                FailureCode.SEQUENTIAL_DIGITS,
                "Phone number cannot start with sequential digits.",
            )

        if any(code in digits for code in self.emergency_numbers):
            return ValidationOutcome.reject(
                FailureCode.EMERGENCY_NUMBER,
                "Emergency numbers cannot be used.",
            )

        return ValidationOutcome.reject(
            FailureCode.UNRECOGNIZED_FORMAT,
            "Phone number format is not recognized.",
        )
