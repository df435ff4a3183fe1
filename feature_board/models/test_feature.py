# feature_board/models/test_feature.py
"""
기능 요청 애그리거트 불변식 테스트

사용법: python -m pytest feature_board/models/test_feature.py -v
"""

from datetime import datetime, timezone

import pytest

from feature_board.core.exceptions import CommentNotFoundError, FieldValidationError, ForbiddenError
from feature_board.models.feature import FeatureRequest, FeatureSummary, Likes


def _assert_counts_consistent(feature: FeatureRequest):
    assert feature.likes.count == len(feature.likes.users)
    assert len(set(feature.likes.users)) == len(feature.likes.users)
    assert feature.comments.count == len(feature.comments.data)


def test_new_feature_defaults():
    feature = FeatureRequest.new("Dark Mode", "Please add it", created_by="u1")

    assert feature.status == "Open"
    assert feature.likes.count == 0 and feature.likes.users == []
    assert feature.comments.count == 0 and feature.comments.data == []
    assert feature.is_deleted is False
    assert feature.created_at.tzinfo is not None


@pytest.mark.parametrize("title", ["", "   ", None])
def test_new_feature_requires_title(title):
    with pytest.raises(FieldValidationError):
        FeatureRequest.new(title, "desc", created_by="u1")


def test_like_is_idempotent():
    feature = FeatureRequest.new("A", "d", created_by="u1")

    assert feature.like("u2") is True
    assert feature.like("u2") is False
    assert feature.likes.users == ["u2"]
    _assert_counts_consistent(feature)


def test_unlike_without_like_is_noop():
    feature = FeatureRequest.new("A", "d", created_by="u1")

    assert feature.unlike("u2") is False
    assert feature.likes.count == 0


def test_toggle_twice_returns_to_original_state():
    feature = FeatureRequest.new("A", "d", created_by="u1")
    feature.like("u3")
    before = feature.likes.users

    assert feature.toggle_like("u2") is True
    assert "u2" in feature.likes
    assert feature.toggle_like("u2") is False
    assert feature.likes.users == before
    _assert_counts_consistent(feature)


def test_comment_lifecycle_and_ownership():
    feature = FeatureRequest.new("A", "d", created_by="u1")
    first = feature.add_comment("u1", "nice")
    second = feature.add_comment("u2", "agree")
    assert feature.comments.count == 2

    with pytest.raises(ForbiddenError):
        feature.delete_comment(first.comment_id, "u2")
    assert feature.comments.find(first.comment_id) is not None

    feature.delete_comment(first.comment_id, "u1")
    assert [c.comment_id for c in feature.comments.data] == [second.comment_id]
    _assert_counts_consistent(feature)


def test_delete_unknown_comment():
    feature = FeatureRequest.new("A", "d", created_by="u1")
    with pytest.raises(CommentNotFoundError):
        feature.delete_comment("missing", "u1")


def test_blank_comment_rejected():
    feature = FeatureRequest.new("A", "d", created_by="u1")
    with pytest.raises(FieldValidationError):
        feature.add_comment("u1", "  ")
    assert feature.comments.count == 0


def test_comment_ids_are_unique():
    feature = FeatureRequest.new("A", "d", created_by="u1")
    ids = {feature.add_comment("u1", f"c{i}").comment_id for i in range(20)}
    assert len(ids) == 20


def test_change_status_has_no_transition_table():
    feature = FeatureRequest.new("A", "d", created_by="u1")
    feature.change_status("Done")
    feature.change_status("Open")
    assert feature.status == "Open"


def test_to_dict_from_dict_preserves_state():
    feature = FeatureRequest.new("A", "d", created_by="u1")
    feature.like("u2")
    feature.add_comment("u3", "hello")

    restored = FeatureRequest.from_dict(feature.to_dict())

    assert restored == feature
    assert restored.to_dict()["likes"] == {"count": 1, "users": ["u2"]}


def test_from_dict_repairs_drifted_counters():
    data = {
        "feature_id": "f1",
        "title": "A",
        "created_by": "u1",
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "likes": {"count": 5, "users": ["u2", "u2", "u3"]},
        "comments": {"count": 3, "data": [
            {"comment_id": "c1", "comments_by": "u1", "comment": "x", "created_at": datetime(2024, 1, 2)},
        ]},
    }

    feature = FeatureRequest.from_dict(data)

    assert feature.likes.count == 2
    assert feature.likes.users == ["u2", "u3"]
    assert feature.comments.count == 1
    assert feature.comments.data[0].created_at.tzinfo == timezone.utc


def test_likes_count_cannot_be_assigned():
    likes = Likes(["u1"])
    with pytest.raises(AttributeError):
        likes.count = 10


def test_summary_has_comment_count_only():
    feature = FeatureRequest.new("Dark Mode", "Night theme", created_by="u1")
    feature.add_comment("u2", "yes")

    summary = feature.summary()

    assert isinstance(summary, FeatureSummary)
    assert summary.total_comments == 1
    assert not hasattr(summary, "comments")


@pytest.mark.parametrize("term,expected", [
    ("dark", True),
    ("NIGHT", True),
    ("csv", False),
])
def test_summary_matches_title_or_description(term, expected):
    summary = FeatureRequest.new("Dark Mode", "Night theme", created_by="u1").summary()
    assert summary.matches(term) is expected
