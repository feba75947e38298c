import re

from textscope.domain.exceptions import TextValidationError

MIN_TEXT_LENGTH = 1
DEFAULT_MAX_TEXT_LENGTH = 100_000

# Non-printable control characters; tab, newline and carriage return are kept
_CONTROL_CHARACTERS_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def sanitize_text(raw: object) -> str:
    if not isinstance(raw, str):
        return ""
    return _CONTROL_CHARACTERS_RE.sub("", raw)


def validate_and_sanitize_text(
    raw: object, max_length: int = DEFAULT_MAX_TEXT_LENGTH
) -> str:
    """
    Return the sanitized, trimmed text or raise TextValidationError.
    """
    sanitized = sanitize_text(raw).strip()
    if len(sanitized) < MIN_TEXT_LENGTH:
        raise TextValidationError(
            "Text is required and cannot be empty after trimming."
        )
    if len(sanitized) > max_length:
        raise TextValidationError(
            f"Text must be at most {max_length:,} characters (got {len(sanitized):,})."
        )
    return sanitized
