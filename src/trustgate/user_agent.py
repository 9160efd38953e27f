"""User agent authenticity checks.

Flags declared client identities that look automated, fake, or crafted to
carry an injection payload.
"""

import re

from trustgate.schemas import ACCEPTED, FailureCode, ValidationOutcome

# Bot/scraper, HTTP library and scripting-language indicators
SUSPICIOUS_TOKENS = frozenset(
    [
        "bot",
        "crawler",
        "spider",
        "scrape",
        "headless",
        "phantom",
        "selenium",
        "puppeteer",
        "playwright",
        "webdriver",
        "curl",
        "wget",
        "httpie",
        "python",
        "requests",
        "urllib",
        "aiohttp",
        "httpx",
        "axios",
        "node-fetch",
        "okhttp",
        "go-http-client",
        "libwww",
        "lwp",
        "httpclient",
        "java",
        "perl",
        "ruby",
        "php",
        "node",
        "postman",
        "insomnia",
        "powershell",
        "scan",
        "fetch",
        "monitor",
        "check",
        "automation",
    ]
)

# Presence of any of these excuses a suspicious token (e.g. Googlebot's
# "Mozilla/5.0 (compatible; Googlebot/2.1)")
BROWSER_TOKENS = ("mozilla", "chrome", "safari", "firefox", "edge", "opera")

# Browser, rendering engine and platform tokens
LEGITIMATE_TOKENS = BROWSER_TOKENS + (
    "webkit",
    "gecko",
    "trident",
    "presto",
    "blink",
    "windows",
    "macintosh",
    "mac os",
    "linux",
    "x11",
    "android",
    "iphone",
    "ipad",
    "mobile",
)

FAKE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^[\d.]+$"),  # bare version
    re.compile(r"\b(?:test|fake|dummy|unknown|null|undefined)\b", re.IGNORECASE),
    re.compile(r"^\d+$"),
    re.compile(r"^[a-z]{1,10}$", re.IGNORECASE),
    re.compile(r"(.)\1{9,}"),
)

# Semicolons separate comment tokens in real user agents, so only a
# semicolon that chains a command counts.
MALICIOUS_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in [
        r"\b(?:select|union|insert|update|delete|drop)\b",
        r"['\"]",
        r"<\s*script",
        r"javascript\s*:",
        r"\bon\w+\s*=",
        r"[<>]",
        r"\.\./",
        r"\.\.\\",
        r"[&|`$]",
        r";\s*(?:rm|cat|sh|bash|ls|nc|echo|wget|chmod)\b",
    ]
)

MIN_LENGTH = 20
MAX_LENGTH = 1000


class UserAgentAuthenticityChecker:
    """Validates a declared User-Agent header. Stateless."""

    def __init__(
        self,
        suspicious_tokens: frozenset[str] = SUSPICIOUS_TOKENS,
        legitimate_tokens: tuple[str, ...] = LEGITIMATE_TOKENS,
    ):
        self.suspicious_tokens = suspicious_tokens
        self.legitimate_tokens = legitimate_tokens

    def is_automated(self, user_agent: str) -> bool:
        """Suspicious token present without a browser token to excuse it."""
        ua_lower = user_agent.lower()
        if not any(token in ua_lower for token in self.suspicious_tokens):
            return False
        return not any(token in ua_lower for token in BROWSER_TOKENS)

    def validate(self, user_agent: str) -> ValidationOutcome:
        """Validate a user agent string."""
        if not user_agent or not user_agent.strip():
            return ValidationOutcome.reject(
                FailureCode.MISSING_CLIENT_IDENTITY,
                "Invalid browser information. Please use a standard web browser.",
            )

        if self.is_automated(user_agent):
            return ValidationOutcome.reject(
                FailureCode.AUTOMATED_CLIENT_SUSPECTED,
                "Automated clients are not allowed.",
            )

        if len(user_agent) < MIN_LENGTH:
            return ValidationOutcome.reject(
                FailureCode.TOO_SHORT, "Invalid browser information detected."
            )
        if len(user_agent) > MAX_LENGTH:
            return ValidationOutcome.reject(
                FailureCode.TOO_LONG, "Invalid browser information detected."
            )

        ua_lower = user_agent.lower()
        if not any(token in ua_lower for token in self.legitimate_tokens):
            return ValidationOutcome.reject(
                FailureCode.NON_BROWSER_CLIENT,
                "Please use a standard web browser.",
            )

        if any(p.search(user_agent) for p in FAKE_PATTERNS):
            return ValidationOutcome.reject(
                FailureCode.FAKE_CLIENT_IDENTITY,
                "Invalid browser information detected.",
            )

        if any(p.search(user_agent) for p in MALICIOUS_PATTERNS):
            return ValidationOutcome.reject(
                FailureCode.MALICIOUS_CHARACTERS,
                "Invalid characters detected in browser information.",
            )

        return ACCEPTED
