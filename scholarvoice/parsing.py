"""Shared parsing helpers for runtime value normalization."""

from __future__ import annotations

from .models.datatypes import ReadingMode


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_reading_mode(value: object, field_name: str = "mode") -> ReadingMode:
    """Parse a reading mode token case-insensitively.

    Raises:
        ValueError: If the token is not a supported reading mode.
    """

    if isinstance(value, ReadingMode):
        return value
    normalized = normalize_optional_string(value)
    if normalized is not None:
        try:
            return ReadingMode(normalized.lower())
        except ValueError:
            pass
    supported = ", ".join(mode.value for mode in ReadingMode)
    raise ValueError(f"`{field_name}` must be one of: {supported}; got `{value}`.")


def parse_positive_int(value: object, field_name: str) -> int:
    """Parse a strictly positive integer from an int or digit string.

    Raises:
        ValueError: If the value is a boolean, non-numeric, or not positive.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive integer.")
    if isinstance(value, int):
        parsed = value
    else:
        normalized = normalize_optional_string(value)
        try:
            parsed = int(normalized) if normalized is not None else 0
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a positive integer.") from exc
    if parsed <= 0:
        raise ValueError(f"`{field_name}` must be a positive integer.")
    return parsed
