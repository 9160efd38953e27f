"""Email trust validation.

Checks run in a fixed order and stop at the first failure:

1. address shape (exactly one "@")
2. disposable domain (static list, then the reputation service)
3. common domain typos ("gmial.com" -> "gmail.com")
4. domain format
5. MX or A record
"""

import logging
import re

from trustgate.config import EmailOptions
from trustgate.reputation import ReputationLookup
from trustgate.schemas import ACCEPTED, FailureCode, ValidationOutcome

logger = logging.getLogger("trustgate-email")

# Known disposable email domains. The reputation service covers the long tail.
DISPOSABLE_DOMAINS = frozenset(
    [
        "10minutemail.com",
        "10minutemail.net",
        "10minutemail.org",
        "20minutemail.com",
        "33mail.com",
        "anonymbox.com",
        "binkmail.com",
        "bobmail.info",
        "bugmenot.com",
        "burnermail.io",
        "crazymailing.com",
        "dayrep.com",
        "discard.email",
        "discardmail.com",
        "dispostable.com",
        "emailondeck.com",
        "emailtemporanea.com",
        "emailtemporario.com.br",
        "emkei.cz",
        "fakeinbox.com",
        "fakemail.fr",
        "fakemailgenerator.com",
        "getairmail.com",
        "getnada.com",
        "gmailnator.com",
        "grr.la",
        "guerrillamail.biz",
        "guerrillamail.com",
        "guerrillamail.de",
        "guerrillamail.net",
        "guerrillamail.org",
        "guerrillamailblock.com",
        "harakirimail.com",
        "inboxbear.com",
        "incognitomail.org",
        "jetable.org",
        "mailcatch.com",
        "maildrop.cc",
        "mailforspam.com",
        "mailinator.com",
        "mailinator.net",
        "mailinator2.com",
        "mailnesia.com",
        "mailpoof.com",
        "mailsac.com",
        "mintemail.com",
        "mohmal.com",
        "mytemp.email",
        "mytrashmail.com",
        "nada.email",
        "sharklasers.com",
        "spam4.me",
        "spambox.us",
        "spamgourmet.com",
        "temp-mail.io",
        "temp-mail.org",
        "tempail.com",
        "tempinbox.com",
        "tempmail.com",
        "tempmail.net",
        "tempmailo.com",
        "tempr.email",
        "throwam.com",
        "throwaway.email",
        "throwawaymail.com",
        "trash-mail.com",
        "trashmail.com",
        "trashmail.de",
        "trashmail.net",
        "wegwerfmail.de",
        "wegwerfmail.net",
        "yopmail.com",
        "yopmail.fr",
        "yopmail.net",
        "zep-hyr.com",
    ]
)

# Misspelled domain -> intended domain
COMMON_TYPOS: dict[str, str] = {
    # Gmail
    "gmial.com": "gmail.com",
    "gmai.com": "gmail.com",
    "gmil.com": "gmail.com",
    "gmaill.com": "gmail.com",
    "gmal.com": "gmail.com",
    "gnail.com": "gmail.com",
    "gamil.com": "gmail.com",
    "gmail.co": "gmail.com",
    "gmail.cm": "gmail.com",
    "gmail.con": "gmail.com",
    "gmail.om": "gmail.com",
    # Yahoo
    "yahooo.com": "yahoo.com",
    "yaho.com": "yahoo.com",
    "yhoo.com": "yahoo.com",
    "yahoo.co": "yahoo.com",
    "yahoo.con": "yahoo.com",
    # Hotmail / Outlook
    "hotmial.com": "hotmail.com",
    "hotmal.com": "hotmail.com",
    "hotmai.com": "hotmail.com",
    "hotmil.com": "hotmail.com",
    "hotmail.co": "hotmail.com",
    "hotmail.con": "hotmail.com",
    "outlok.com": "outlook.com",
    "outloo.com": "outlook.com",
    "outlook.co": "outlook.com",
    "outlook.con": "outlook.com",
    # Apple
    "iclod.com": "icloud.com",
    "icloud.co": "icloud.com",
    "icoud.com": "icloud.com",
    # AOL
    "aol.co": "aol.com",
    "aoll.com": "aol.com",
}

# Hostname: dot-separated labels of [a-z0-9-], no leading/trailing hyphen,
# alphabetic top-level label of 2-6 characters.
DOMAIN_PATTERN = re.compile(
    r"^(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,6}$"
)


def split_email(email: str) -> tuple[str, str] | None:
    """Split an address into (local, domain), or None if malformed.

    The domain is lower-cased and trimmed.
    """
    if not email or email.count("@") != 1:
        return None
    local, domain = email.strip().split("@")
    domain = domain.strip().lower()
    if not local or not domain:
        return None
    return local, domain


def is_valid_domain_format(domain: str) -> bool:
    """Check hostname syntax, length 4-253 and the presence of a dot."""
    if not 4 <= len(domain) <= 253:
        return False
    if "." not in domain:
        return False
    return bool(DOMAIN_PATTERN.match(domain))


class EmailTrustValidator:
    """Validates that an email address is worth trusting at registration."""

    def __init__(
        self,
        reputation: ReputationLookup,
        disposable_domains: frozenset[str] = DISPOSABLE_DOMAINS,
        typos: dict[str, str] | None = None,
    ):
        """Initialize the validator.

        Args:
            reputation: Networked disposable/MX lookups (cached, fail-open).
            disposable_domains: Static disposable list checked before the network.
            typos: Misspelled-domain map. Defaults to COMMON_TYPOS.
        """
        self.reputation = reputation
        self.disposable_domains = disposable_domains
        self.typos = typos if typos is not None else COMMON_TYPOS

    async def validate(
        self, email: str, options: EmailOptions | None = None
    ) -> ValidationOutcome:
        """Validate an email address.

        Args:
            email: Raw address as submitted.
            options: Which checks to run.

        Returns:
            The first failing check's outcome, or an accepting outcome.
        """
        options = options or EmailOptions()

        parts = split_email(email)
        if parts is None:
            return ValidationOutcome.reject(
                FailureCode.MALFORMED_EMAIL,
                "Please enter a valid email address.",
            )
        _, domain = parts

        if not options.allow_disposable:
            if domain in self.disposable_domains or await self.reputation.is_disposable(domain):
                logger.info(f"Rejected disposable email domain: {domain}")
                return ValidationOutcome.reject(
                    FailureCode.DISPOSABLE_EMAIL,
                    "Disposable email addresses are not allowed. Please use a permanent email.",
                )

        if options.suggest_typos and domain in self.typos:
            suggestion = self.typos[domain]
            return ValidationOutcome.reject(
                FailureCode.POSSIBLE_TYPO,
                f"Did you mean {parts[0]}@{suggestion}?",
                suggestion=suggestion,
            )

        if not is_valid_domain_format(domain):
            return ValidationOutcome.reject(
                FailureCode.INVALID_DOMAIN_FORMAT,
                "The email domain is not valid.",
            )

        if options.check_mx and not await self.reputation.has_mail_exchanger(domain):
            return ValidationOutcome.reject(
                FailureCode.NO_MAIL_EXCHANGER,
                "The email domain cannot receive mail.",
            )

        return ACCEPTED
