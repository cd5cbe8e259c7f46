"""Tests for post content validation."""

import pytest

from emojifeed.core.errors import ValidationAppError
from emojifeed.utils.content_validation import content_errors, validate_post_content


@pytest.mark.parametrize(
    "content",
    [
        "🎉",
        "👍🏽",
        "🇧🇷",
        "👨‍👩‍👧‍👦",
        "🍕🍔🌮",
        "🎉" * 280,
    ],
)
def test_accepts_emoji_only_content(content: str) -> None:
    assert validate_post_content(content) == content


@pytest.mark.parametrize(
    "content, message",
    [
        ("", "Content must contain at least 1 character(s)"),
        ("hello", "Only emojis are allowed!"),
        ("🎉 hi", "Only emojis are allowed!"),
        ("🎉" * 281, "Content must contain at most 280 character(s)"),
    ],
)
def test_rejects_invalid_content(content: str, message: str) -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        validate_post_content(content)

    assert exc_info.value.code == "invalid_content"
    assert exc_info.value.message == message
    assert message in exc_info.value.details["fields"]["content"]


def test_reports_every_problem() -> None:
    errors = content_errors("a" * 300)

    assert errors == [
        "Content must contain at most 280 character(s)",
        "Only emojis are allowed!",
    ]


def test_max_chars_is_configurable() -> None:
    assert content_errors("🎉🎉🎉", max_chars=3) == []
    assert content_errors("🎉🎉🎉🎉", max_chars=3) == [
        "Content must contain at most 3 character(s)"
    ]
