"""Validation hooks on the ORM entities."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from agora.core.errors import InvalidInputError, InvalidVoteValue
from agora.db.time import ensure_utc
from agora.models import Comment, Post, TargetKind, User, Vote
from agora.models.vote import validate_vote_value


@pytest.mark.parametrize("username", ["ab", "has space", "x" * 33, "semi;colon", ""])
def test_user_rejects_bad_usernames(username: str) -> None:
    with pytest.raises(InvalidInputError):
        User(username=username, karma=0)


def test_user_accepts_valid_username() -> None:
    user = User(username="alice_01", karma=-4)
    assert user.username == "alice_01"
    assert user.karma == -4


def test_user_karma_must_be_int() -> None:
    with pytest.raises(InvalidInputError, match="Karma must be an integer"):
        User(username="alice", karma="5")


def test_post_strips_title_and_lowercases_community() -> None:
    post = Post(
        author_id=1,
        title="  Hello  ",
        content="body",
        community="Python",
        upvotes=0,
        downvotes=0,
        comment_count=0,
    )
    assert post.title == "Hello"
    assert post.community == "python"
    assert post.score == 0


@pytest.mark.parametrize(
    ("field", "value", "message"),
    [
        ("title", "   ", "Title is required"),
        ("title", "t" * 301, "Title cannot exceed 300 characters"),
        ("content", "", "Content is required"),
        ("upvotes", -1, "upvotes must be a non-negative integer"),
        ("downvotes", True, "downvotes must be a non-negative integer"),
        ("comment_count", -3, "comment_count must be a non-negative integer"),
    ],
)
def test_post_field_validation(field: str, value: object, message: str) -> None:
    post = Post(author_id=1, title="ok", content="ok", community="general")
    with pytest.raises(InvalidInputError, match=message):
        setattr(post, field, value)


def test_comment_requires_content() -> None:
    with pytest.raises(InvalidInputError, match="Content is required"):
        Comment(post_id=1, author_id=1, content=" \n ")


def test_comment_score_uses_counters() -> None:
    comment = Comment(post_id=1, author_id=1, content="hi", upvotes=5, downvotes=2)
    assert comment.score == 3


@pytest.mark.parametrize("value", [1, 0, -1])
def test_validate_vote_value_accepts_legal_values(value: int) -> None:
    assert validate_vote_value(value) == value


@pytest.mark.parametrize("value", [2, -2, 100, True, False, "1", 1.0, None])
def test_validate_vote_value_rejects(value: object) -> None:
    with pytest.raises(InvalidVoteValue, match="Invalid vote value"):
        validate_vote_value(value)


def test_vote_row_cannot_store_zero() -> None:
    with pytest.raises(InvalidVoteValue):
        Vote(user_id=1, target_kind=TargetKind.POST, target_id=1, value=0)


def test_vote_coerces_target_kind() -> None:
    vote = Vote(user_id=1, target_kind="comment", target_id=3, value=-1)
    assert vote.target_kind is TargetKind.COMMENT


def test_unknown_target_kind_is_invalid_input() -> None:
    with pytest.raises(InvalidInputError, match="Unknown vote target kind"):
        TargetKind.coerce("thread")


def test_ensure_utc_attaches_zone_to_naive_values() -> None:
    naive = datetime(2024, 1, 1, 12, 0)
    assert ensure_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    plus_two = timezone(timedelta(hours=2))
    assert ensure_utc(datetime(2024, 1, 1, 14, 0, tzinfo=plus_two)).hour == 12
