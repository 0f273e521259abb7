"""Input checks shared by the orchestrators."""

from src.onboarding.core.exceptions import InputValidationError

MAX_NATURAL_KEY_LENGTH = 255


def normalize_natural_key(natural_key: str | None) -> str:
    """Strip surrounding whitespace and reject empty or oversized keys."""
    if not isinstance(natural_key, str):
        raise InputValidationError("naturalKey is required")

    natural_key = natural_key.strip()
    if not natural_key:
        raise InputValidationError("naturalKey is required")
    if len(natural_key) > MAX_NATURAL_KEY_LENGTH:
        raise InputValidationError("naturalKey is too long")
    if any(ch.isspace() or not ch.isprintable() for ch in natural_key):
        raise InputValidationError("naturalKey contains invalid characters")
    return natural_key
