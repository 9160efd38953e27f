"""Institutional (academic) email classification.

Heuristic only: a domain is institutional when it carries an academic
suffix or institution-like keywords, and is never institutional when it
belongs to a consumer mail provider.
"""

from trustgate.email_validator import split_email
from trustgate.schemas import ACCEPTED, FailureCode, ValidationOutcome

# Consumer mail providers (global and regional ISPs)
CONSUMER_DOMAINS = frozenset(
    [
        "gmail.com",
        "googlemail.com",
        "yahoo.com",
        "yahoo.co.uk",
        "yahoo.co.in",
        "yahoo.co.jp",
        "yahoo.fr",
        "yahoo.de",
        "yahoo.es",
        "yahoo.it",
        "ymail.com",
        "rocketmail.com",
        "hotmail.com",
        "hotmail.co.uk",
        "hotmail.fr",
        "hotmail.de",
        "hotmail.es",
        "hotmail.it",
        "outlook.com",
        "outlook.co.uk",
        "outlook.fr",
        "outlook.de",
        "live.com",
        "live.co.uk",
        "live.fr",
        "msn.com",
        "icloud.com",
        "me.com",
        "mac.com",
        "aol.com",
        "protonmail.com",
        "proton.me",
        "pm.me",
        "tutanota.com",
        "fastmail.com",
        "hey.com",
        "mail.com",
        "zoho.com",
        "yandex.com",
        "yandex.ru",
        "mail.ru",
        "rambler.ru",
        "gmx.com",
        "gmx.de",
        "gmx.net",
        "web.de",
        "t-online.de",
        "freenet.de",
        "orange.fr",
        "free.fr",
        "laposte.net",
        "libero.it",
        "virgilio.it",
        "btinternet.com",
        "sky.com",
        "virginmedia.com",
        "comcast.net",
        "verizon.net",
        "att.net",
        "sbcglobal.net",
        "cox.net",
        "charter.net",
        "shaw.ca",
        "rogers.com",
        "bigpond.com",
        "optusnet.com.au",
        "qq.com",
        "163.com",
        "126.com",
        "sina.com",
        "naver.com",
        "daum.net",
        "rediffmail.com",
        "uol.com.br",
        "bol.com.br",
    ]
)

EDU_COUNTRY_CODES = (
    "ar", "au", "az", "bd", "bh", "bo", "br", "bz", "cn", "co", "cu", "cy",
    "do", "dz", "ec", "eg", "es", "et", "fj", "gh", "gr", "gt", "hk", "hn",
    "ht", "in", "iq", "it", "jm", "jo", "kh", "kw", "kz", "lb", "lk", "ly",
    "mk", "mm", "mn", "mo", "mt", "mx", "my", "ng", "ni", "np", "om", "pa",
    "pe", "ph", "pk", "pl", "pr", "ps", "pt", "py", "qa", "ro", "ru", "sa",
    "sg", "sl", "sv", "sy", "tr", "tt", "tw", "ua", "uy", "ve", "vn", "ye",
    "za",
)

ACADEMIC_SUFFIXES: tuple[str, ...] = (".edu",) + tuple(
    f".edu.{cc}" for cc in EDU_COUNTRY_CODES
)

PRIMARY_KEYWORDS = ("university", "college", "school", "institute", "academy")

SECONDARY_KEYWORDS = (
    "univ",
    "campus",
    "education",
    "student",
    "faculty",
    "academic",
    "research",
    "library",
    "alumni",
    "grad",
    "undergrad",
)

LABEL_HINTS = ("edu", "ac", "univ", "college", "school")


def has_academic_suffix(domain: str) -> bool:
    """`.edu`, `.edu.<cc>` or `.ac.<tld>`."""
    if domain.endswith(ACADEMIC_SUFFIXES):
        return True
    labels = domain.split(".")
    return len(labels) >= 3 and labels[-2] == "ac"


class InstitutionalIdentityClassifier:
    """Classifies email domains as institutional or not. Stateless."""

    def __init__(self, consumer_domains: frozenset[str] = CONSUMER_DOMAINS):
        self.consumer_domains = consumer_domains

    def classify(self, email: str) -> ValidationOutcome:
        """Accept institutional addresses; reject everything else."""
        parts = split_email(email)
        if parts is None:
            return ValidationOutcome.reject(
                FailureCode.MALFORMED_EMAIL,
                "Please enter a valid email address.",
            )
        _, domain = parts

        if domain in self.consumer_domains:
            return ValidationOutcome.reject(
                FailureCode.PERSONAL_EMAIL_DOMAIN,
                "Please use your institutional email address, not a personal one.",
            )

        if has_academic_suffix(domain) or any(k in domain for k in PRIMARY_KEYWORDS):
            return ACCEPTED

        if any(k in domain for k in SECONDARY_KEYWORDS):
            return ACCEPTED

        labels = domain.split(".")
        if len(labels) >= 3 and any(
            hint in label for label in labels for hint in LABEL_HINTS
        ):
            return ACCEPTED

        return ValidationOutcome.reject(
            FailureCode.NOT_INSTITUTIONAL_DOMAIN,
            "This email address does not appear to belong to an educational institution.",
        )
