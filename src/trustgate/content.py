"""Content risk analysis for free-text submissions.

Runs a fixed sequence of heuristic checks and stops at the first failure:

1. blank input (accepted), one repeated character (low quality)
2. profanity
3. spam keyword density (strict mode only)
4. suspicious structural patterns
5. URL count
6. HTML presence
7. XSS signatures
8. SQL injection signatures
9. low-quality text
"""

import re

from trustgate.config import ContentOptions
from trustgate.schemas import ACCEPTED, ContentMode, FailureCode, ValidationOutcome

# =============================================================================
# Reference Tables
# =============================================================================

# Matched as case-insensitive substrings
PROFANITY_LEXICON = frozenset(
    [
        "fuck",
        "shit",
        "asshole",
        "bitch",
        "bastard",
        "cunt",
        "dickhead",
        "motherfucker",
        "wanker",
        "bollocks",
        "twat",
        "slut",
        "whore",
        "nigger",
        "faggot",
        "kill yourself",
    ]
)

SPAM_KEYWORDS = frozenset(
    [
        "free",
        "urgent",
        "act now",
        "limited time",
        "click here",
        "guaranteed",
        "make money",
        "work from home",
        "viagra",
        "casino",
        "lottery",
        "winner",
        "congratulations",
        "risk free",
        "no credit check",
        "earn cash",
        "double your",
        "100% free",
    ]
)

SUSPICIOUS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"[!?]{3,}"),  # excessive punctuation
    re.compile(r"[A-Z]{10,}"),  # shouting
    re.compile(r"(.)\1{5,}"),  # character repeated 6+ times
    re.compile(r"(?<![\w/.])www\.[a-z0-9-]+(?:\.[a-z0-9-]+)+", re.IGNORECASE),  # bare URL
    re.compile(r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}\b"),  # card-shaped
    re.compile(r"\b\d{3}[\s-]\d{2}[\s-]\d{4}\b"),  # SSN-shaped
)

URL_PATTERN = re.compile(r"https?://", re.IGNORECASE)
TAG_PATTERN = re.compile(r"<[^>]*>")

XSS_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE | re.DOTALL)
    for p in [
        r"<\s*script\b",
        r"<\s*/\s*script\s*>",
        r"javascript\s*:",
        r"vbscript\s*:",
        r"\bon(?:load|error|click|mouseover)\s*=",
        r"<\s*(?:iframe|object|embed|form)\b",
        r"expression\s*\(",
        r"url\s*\(",
        r"@import",
    ]
)

SQL_INJECTION_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE | re.DOTALL)
    for p in [
        r"\b(?:select|union|insert|update|delete|drop|create|alter)\b",
        r"\b(\d+)\s*=\s*\1\b",  # 1=1
        r"\b(?:or|and)\s+\d+\s*=\s*\d+",
        r"['\"]\s*(?:or|and)\s+['\"]?\w+['\"]?\s*(?:=|like\b)",  # ' or 'a'='a
        r"\bexec\b",
        r"\b(?:sp|xp)_\w+",
        r"--",
        r"#",
        r"/\*.*?\*/",
    ]
)


_LOW_QUALITY = ValidationOutcome.reject(
    FailureCode.LOW_QUALITY_CONTENT,
    "Content does not appear to be meaningful text.",
)


class ContentRiskAnalyzer:
    """Heuristic analyzer for free text. Stateless and reusable."""

    def __init__(
        self,
        profanity: frozenset[str] = PROFANITY_LEXICON,
        spam_keywords: frozenset[str] = SPAM_KEYWORDS,
        suspicious_patterns: tuple[re.Pattern[str], ...] = SUSPICIOUS_PATTERNS,
    ):
        self.profanity = profanity
        self.spam_keywords = spam_keywords
        self.suspicious_patterns = suspicious_patterns

    def analyze(
        self, text: str, options: ContentOptions | None = None
    ) -> ValidationOutcome:
        """Analyze `text` and return the first failing check, if any."""
        options = options or ContentOptions()

        if not text or not text.strip():
            return ACCEPTED

        # Before the signature checks: "----" and "####" are filler, not SQL.
        if _is_single_repeated_char(text.strip()):
            return _LOW_QUALITY

        lowered = text.lower()

        if options.mode != ContentMode.NONE and self._contains_profanity(lowered):
            return ValidationOutcome.reject(
                FailureCode.PROFANE_CONTENT,
                "Content contains inappropriate language.",
            )

        if options.mode == ContentMode.STRICT and self.count_spam_keywords(lowered) >= 2:
            return ValidationOutcome.reject(
                FailureCode.SPAM_CONTENT,
                "Content appears to be spam.",
            )

        if self._has_suspicious_pattern(text):
            return ValidationOutcome.reject(
                FailureCode.SUSPICIOUS_PATTERN,
                "Content contains suspicious patterns.",
            )

        url_count = len(URL_PATTERN.findall(text))
        if url_count > options.max_urls:
            return ValidationOutcome.reject(
                FailureCode.TOO_MANY_URLS,
                f"Content contains too many links ({url_count}, maximum {options.max_urls}).",
            )

        if not options.allow_html and TAG_PATTERN.sub("", text) != text:
            return ValidationOutcome.reject(
                FailureCode.HTML_NOT_ALLOWED,
                "HTML markup is not allowed.",
            )

        if any(p.search(text) for p in XSS_PATTERNS):
            return ValidationOutcome.reject(
                FailureCode.XSS_SUSPECTED,
                "Content contains potentially dangerous markup.",
            )

        if any(p.search(text) for p in SQL_INJECTION_PATTERNS):
            return ValidationOutcome.reject(
                FailureCode.SQL_INJECTION_SUSPECTED,
                "Content contains potentially dangerous database syntax.",
            )

        if is_low_quality(text):
            return _LOW_QUALITY

        return ACCEPTED

    def _contains_profanity(self, lowered: str) -> bool:
        return any(word in lowered for word in self.profanity)

    def count_spam_keywords(self, lowered: str) -> int:
        """Number of distinct spam keywords present in lower-cased text."""
        return sum(1 for keyword in self.spam_keywords if keyword in lowered)

    def _has_suspicious_pattern(self, text: str) -> bool:
        return any(p.search(text) for p in self.suspicious_patterns)


def _is_single_repeated_char(text: str) -> bool:
    return len(text) > 1 and len(set(text)) == 1


def is_low_quality(text: str) -> bool:
    """Check whether text looks like filler rather than real content."""
    trimmed = text.strip()
    if not trimmed:
        return False

    if _is_single_repeated_char(trimmed):
        return True

    length = len(trimmed)
    digits = sum(1 for c in trimmed if c.isdigit())
    if digits / length > 0.8:
        return True

    symbols = sum(1 for c in trimmed if not c.isalnum() and not c.isspace())
    if symbols / length > 0.5:
        return True

    words = trimmed.split()
    if len(words) > 5:
        short = sum(1 for w in words if len(w) < 3)
        if short / len(words) > 0.7:
            return True

    return False
