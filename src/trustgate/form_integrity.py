"""Form integrity checks: honeypot field, fill time, input sanitizing."""

import logging
import re
from datetime import datetime, timezone

from trustgate.config import FormIntegrityOptions
from trustgate.schemas import ACCEPTED, FailureCode, ValidationOutcome

logger = logging.getLogger("trustgate-form")

# Control characters except tab (\x09), newline (\x0A) and carriage return (\x0D)
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def sanitize_input(value: str) -> str:
    """Remove NUL and control characters, then trim whitespace."""
    return _CONTROL_CHARS.sub("", value.replace("\0", "")).strip()


def _as_datetime(value: datetime | float | int | str) -> datetime:
    """Accept a datetime, a unix timestamp, or an ISO-8601 string."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str) and value.strip().isdigit():
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class FormIntegrityChecker:
    """Detects bots by a filled honeypot field or an implausibly fast fill."""

    def check(
        self,
        honeypot_value: str | None,
        form_started_at: datetime | float | int | str | None,
        now: datetime | None = None,
        options: FormIntegrityOptions | None = None,
    ) -> ValidationOutcome:
        """Check one form submission.

        Args:
            honeypot_value: Value of the hidden field humans never fill.
            form_started_at: When the form was rendered, if tracked.
            now: Submission time. Defaults to the current time.
            options: Minimum fill time.

        Returns:
            Rejection for a filled honeypot or a too-fast fill, else accept.
        """
        options = options or FormIntegrityOptions()

        if honeypot_value:
            logger.warning("Honeypot field filled")
            return ValidationOutcome.reject(
                FailureCode.HONEYPOT_TRIGGERED,
                "Invalid form submission detected.",
            )

        if form_started_at is not None:
            try:
                started = _as_datetime(form_started_at)
            except (TypeError, ValueError, OverflowError, OSError):
                logger.warning(f"Unparseable form start time: {form_started_at!r}")
                started = None
            if started is not None:
                now = now or datetime.now(timezone.utc)
                elapsed = (now - started).total_seconds()
                if elapsed < options.min_fill_seconds:
                    return ValidationOutcome.reject(
                        FailureCode.SUBMITTED_TOO_FAST,
                        "Form was submitted too quickly. Please try again.",
                    )

        return ACCEPTED
