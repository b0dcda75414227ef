"""Validation utilities for identifiers and budgets.

Container tags are the partition keys of the memory backend, which only
accepts letters, digits, hyphens and underscores.
"""

import re

from vapi_memory.exceptions import ValidationError

_CONTAINER_TAG_DISALLOWED = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_container_tag(tag: str) -> str:
    """Strip every character the backend rejects from a container tag.

    Args:
        tag: Raw identifier, e.g. a phone-number shaped user id

    Returns:
        The identifier reduced to ``[A-Za-z0-9_-]``

    Raises:
        ValidationError: If nothing is left after sanitizing
    """
    sanitized = _CONTAINER_TAG_DISALLOWED.sub("", tag)
    if not sanitized:
        raise ValidationError(f"Container tag {tag!r} has no usable characters")
    return sanitized


def validate_user_id(user_id: str, field_name: str = "user_id") -> str:
    """Validate a user id is a non-empty string.

    Args:
        user_id: The identifier to validate
        field_name: Name of the field for error messages

    Returns:
        The validated identifier

    Raises:
        ValidationError: If the identifier is empty or not a string
    """
    if not isinstance(user_id, str) or not user_id.strip():
        raise ValidationError(f"{field_name} must be a non-empty string")
    return user_id


def validate_token_budget(max_tokens: int | None) -> int | None:
    """Validate an optional token budget override.

    Args:
        max_tokens: Budget to validate, or None for the configured default

    Returns:
        The validated budget

    Raises:
        ValidationError: If the budget is not a positive integer
    """
    if max_tokens is None:
        return None
    if isinstance(max_tokens, bool) or not isinstance(max_tokens, int):
        raise ValidationError("max_tokens must be an integer")
    if max_tokens <= 0:
        raise ValidationError(f"max_tokens must be positive (got {max_tokens})")
    return max_tokens
