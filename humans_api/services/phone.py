"""Phone number normalization and suffix matching."""

import re

_NON_DIGITS = re.compile(r"\D")

# Subscriber digits stay stable in the last 9 positions across the
# regions we serve, regardless of country code or trunk prefix.
SUFFIX_LENGTH = 9


def normalize_phone(phone: str) -> str:
    """Strip every non-digit character from a phone string."""
    return _NON_DIGITS.sub("", phone)


def phone_suffix(phone: str) -> str | None:
    """Return the comparable suffix of a phone number.

    Returns:
        The last nine digits, or None when the number has fewer digits
        than that and cannot be compared reliably.
    """
    digits = normalize_phone(phone)
    if len(digits) < SUFFIX_LENGTH:
        return None
    return digits[-SUFFIX_LENGTH:]


def phones_match(a: str, b: str) -> bool:
    """Compare two phone numbers by their last nine digits.

    ``+1-202-555-0123`` and ``12025550123`` match; numbers shorter than
    nine digits never match anything, including themselves.
    """
    suffix_a = phone_suffix(a)
    suffix_b = phone_suffix(b)
    if suffix_a is None or suffix_b is None:
        return False
    return suffix_a == suffix_b
