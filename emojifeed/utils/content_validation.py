"""Precondition checks for post content.

Content must be 1..N Unicode code points long and consist solely of emoji
(including ZWJ sequences, skin-tone modifiers and flags).
"""

from __future__ import annotations

import logging

import emoji

from emojifeed.core.errors import ValidationAppError

logger = logging.getLogger(__name__)

MIN_CONTENT_CHARS = 1
MAX_CONTENT_CHARS = 280


def content_errors(content: str, *, max_chars: int = MAX_CONTENT_CHARS) -> list[str]:
    """Collect every problem with ``content``.

    Returns:
        Human-readable messages; empty when the content is valid.
    """
    errors: list[str] = []
    length = len(content)

    if length < MIN_CONTENT_CHARS:
        errors.append(f"Content must contain at least {MIN_CONTENT_CHARS} character(s)")
        return errors
    if length > max_chars:
        errors.append(f"Content must contain at most {max_chars} character(s)")
    if not emoji.purely_emoji(content):
        errors.append("Only emojis are allowed!")
    return errors


def validate_post_content(content: str, *, max_chars: int = MAX_CONTENT_CHARS) -> str:
    """Validate post content.

    Args:
        content: Text submitted by the author.
        max_chars: Maximum length in code points.

    Returns:
        The content unchanged.

    Raises:
        ValidationAppError: With field-level messages under ``details.fields``.
    """
    errors = content_errors(content, max_chars=max_chars)
    if errors:
        logger.info(
            "post.content_rejected",
            extra={"char_count": len(content), "error_count": len(errors)},
        )
        raise ValidationAppError(
            code="invalid_content",
            message=errors[0],
            details={"fields": {"content": errors}},
        )
    return content
