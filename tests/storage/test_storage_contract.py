# mypy: ignore-errors
# tests/storage/test_storage_contract.py
"""Behavioural tests every storage backend must pass.

The ``storage`` fixture is parametrized over the in-memory and SQL
backends, so each test runs once per backend.
"""

import pytest

from civictrack.core.errors import ConflictError
from civictrack.schemas import (
    CommentCreate,
    FollowCreate,
    IssueCreate,
    IssueFilter,
    UserCreate,
    VoteCreate,
)


def _issue(storage, **overrides):
    fields = {
        "title": "Overflowing bin",
        "description": "Bin outside the library is overflowing",
        "category": "garbage",
        "latitude": 40.0,
        "longitude": -74.0,
    }
    fields.update(overrides)
    return storage.create_issue(IssueCreate(**fields))


def _comment(storage, issue_id, content="Same problem here", **overrides):
    return storage.create_comment(CommentCreate(issue_id=issue_id, content=content, **overrides))


# Users


def test_create_and_fetch_user(storage) -> None:
    user = storage.create_user(UserCreate(username="carol", email="carol@example.org"))

    assert user.is_verified is False
    assert user.is_banned is False
    assert storage.get_user(user.id) == user
    assert storage.get_user_by_username("carol") == user
    assert storage.get_user("missing") is None
    assert storage.get_user_by_username("nobody") is None


def test_duplicate_username_or_email_conflicts(storage) -> None:
    storage.create_user(UserCreate(username="carol", email="carol@example.org"))

    with pytest.raises(ConflictError):
        storage.create_user(UserCreate(username="carol", email="other@example.org"))
    with pytest.raises(ConflictError):
        storage.create_user(UserCreate(username="caroline", email="carol@example.org"))
    assert len(storage.list_users()) == 1


def test_ban_and_unban_user(storage) -> None:
    user = storage.create_user(UserCreate(username="dave", email="dave@example.org"))

    assert storage.set_user_banned(user.id, True).is_banned is True
    assert storage.get_user(user.id).is_banned is True
    assert storage.set_user_banned(user.id, False).is_banned is False
    assert storage.set_user_banned("missing", True) is None


# Issues


def test_create_issue_applies_system_defaults(storage) -> None:
    issue = _issue(storage)

    assert issue.id
    assert issue.status == "reported"
    assert issue.upvotes == 0
    assert issue.flag_count == 0
    assert issue.is_hidden is False
    assert issue.images == []
    assert issue.created_at == issue.updated_at
    assert issue.created_at.tzinfo is not None
    assert storage.get_issue(issue.id) == issue


def test_issue_ids_are_unique(storage) -> None:
    ids = {_issue(storage).id for _ in range(5)}
    assert len(ids) == 5


def test_create_issue_records_initial_history(storage) -> None:
    issue = _issue(storage)

    history = storage.list_status_history(issue.id)
    assert len(history) == 1
    assert history[0].status == "reported"
    assert history[0].description == "Issue reported"


def test_get_missing_issue_returns_none(storage) -> None:
    assert storage.get_issue("does-not-exist") is None


def test_returned_records_are_copies(storage) -> None:
    issue = _issue(storage, images=["a.jpg"])

    issue.images.append("b.jpg")
    issue.title = "Changed locally"

    stored = storage.get_issue(issue.id)
    assert stored.images == ["a.jpg"]
    assert stored.title == "Overflowing bin"


def test_filter_by_category_and_status(storage) -> None:
    bin_issue = _issue(storage)
    pipe = _issue(storage, category="water", title="Burst pipe")
    storage.update_issue_status(pipe.id, "resolved")

    assert {i.id for i in storage.filter_issues(IssueFilter())} == {bin_issue.id, pipe.id}
    assert [i.id for i in storage.filter_issues(IssueFilter(category="water"))] == [pipe.id]
    assert [i.id for i in storage.filter_issues(IssueFilter(status="reported"))] == [bin_issue.id]
    assert storage.filter_issues(IssueFilter(category="water", status="reported")) == []


def test_filter_by_radius(storage) -> None:
    near = _issue(storage, latitude=40.0, longitude=-74.0)
    _issue(storage, latitude=41.0, longitude=-74.0)

    criteria = IssueFilter(latitude=40.001, longitude=-74.0, radius=1.0)
    assert [i.id for i in storage.filter_issues(criteria)] == [near.id]


def test_partial_area_is_ignored(storage) -> None:
    _issue(storage, latitude=40.0, longitude=-74.0)
    _issue(storage, latitude=-33.9, longitude=151.2)

    assert len(storage.filter_issues(IssueFilter(latitude=40.0, longitude=-74.0))) == 2


def test_update_status_appends_history(storage) -> None:
    issue = _issue(storage)

    updated = storage.update_issue_status(issue.id, "in-progress")
    assert updated.status == "in-progress"
    assert updated.updated_at > issue.updated_at
    assert updated.created_at == issue.created_at

    storage.update_issue_status(issue.id, "resolved")
    history = storage.list_status_history(issue.id)
    assert [entry.status for entry in history] == ["reported", "in-progress", "resolved"]
    assert history[-1].description == "Status changed to resolved"
    assert history == sorted(history, key=lambda entry: entry.created_at)


def test_update_status_of_missing_issue(storage) -> None:
    assert storage.update_issue_status("missing", "resolved") is None
    assert storage.list_status_history("missing") == []


def test_flagging_hides_at_threshold(storage) -> None:
    issue = _issue(storage)

    assert storage.increment_flag_count(issue.id).is_hidden is False
    assert storage.increment_flag_count(issue.id).is_hidden is False
    third = storage.increment_flag_count(issue.id)
    assert third.flag_count == 3
    assert third.is_hidden is True
    assert storage.list_issues() == []

    fourth = storage.increment_flag_count(issue.id)
    assert fourth.flag_count == 4
    assert fourth.is_hidden is True


def test_flag_missing_issue(storage) -> None:
    assert storage.increment_flag_count("missing") is None


def test_flagged_issues_most_flagged_first(storage) -> None:
    once = _issue(storage)
    twice = _issue(storage)
    _issue(storage)
    storage.increment_flag_count(once.id)
    storage.increment_flag_count(twice.id)
    storage.increment_flag_count(twice.id)

    assert [i.id for i in storage.list_flagged_issues()] == [twice.id, once.id]


def test_showing_issue_clears_flags(storage) -> None:
    issue = _issue(storage)
    for _ in range(3):
        storage.increment_flag_count(issue.id)

    restored = storage.set_issue_hidden(issue.id, False)
    assert restored.is_hidden is False
    assert restored.flag_count == 0
    assert [i.id for i in storage.list_issues()] == [issue.id]

    hidden = storage.set_issue_hidden(issue.id, True)
    assert hidden.is_hidden is True
    assert storage.list_issues() == []
    assert storage.set_issue_hidden("missing", True) is None


def test_issues_by_reporter_skip_hidden(storage) -> None:
    mine = _issue(storage, reporter_id="u-1")
    hidden = _issue(storage, reporter_id="u-1")
    _issue(storage, reporter_id="u-2")
    storage.set_issue_hidden(hidden.id, True)

    assert [i.id for i in storage.list_issues_by_reporter("u-1")] == [mine.id]


def test_increment_upvotes(storage) -> None:
    issue = _issue(storage)

    assert storage.increment_upvotes(issue.id).upvotes == 1
    assert storage.increment_upvotes("missing") is None


# Votes


def test_upvote_counts_once_per_user(storage) -> None:
    issue = _issue(storage)
    vote = VoteCreate(issue_id=issue.id, user_id="u-1", type="upvote")

    storage.create_vote(vote)
    storage.create_vote(vote)

    assert storage.get_issue(issue.id).upvotes == 1
    assert storage.get_vote_by_user_and_issue("u-1", issue.id).type == "upvote"


def test_switching_vote_recounts(storage) -> None:
    issue = _issue(storage)
    storage.create_vote(VoteCreate(issue_id=issue.id, user_id="u-1", type="upvote"))
    storage.create_vote(VoteCreate(issue_id=issue.id, user_id="u-2", type="upvote"))
    assert storage.get_issue(issue.id).upvotes == 2

    storage.create_vote(VoteCreate(issue_id=issue.id, user_id="u-1", type="downvote"))

    assert storage.get_issue(issue.id).upvotes == 1
    assert storage.get_vote_by_user_and_issue("u-1", issue.id).type == "downvote"


def test_delete_vote(storage) -> None:
    issue = _issue(storage)
    storage.create_vote(VoteCreate(issue_id=issue.id, user_id="u-1", type="upvote"))

    assert storage.delete_vote("u-1", issue.id) is True
    assert storage.delete_vote("u-1", issue.id) is False
    assert storage.get_vote_by_user_and_issue("u-1", issue.id) is None
    assert storage.get_issue(issue.id).upvotes == 0


# Comments


def test_comments_listed_oldest_first(storage) -> None:
    issue = _issue(storage)
    first = _comment(storage, issue.id, "first")
    second = _comment(storage, issue.id, "second")
    _comment(storage, _issue(storage).id, "elsewhere")

    assert [c.id for c in storage.list_comments_by_issue(issue.id)] == [first.id, second.id]
    assert storage.list_comments_by_issue("missing") == []


def test_comment_defaults_and_reply(storage) -> None:
    issue = _issue(storage)
    parent = _comment(storage, issue.id, author_id="u-1")
    reply = _comment(storage, issue.id, "reply", parent_id=parent.id)

    assert parent.likes == 0
    assert parent.flag_count == 0
    assert parent.parent_id is None
    assert reply.parent_id == parent.id
    assert storage.get_comment(reply.id) == reply
    assert storage.get_comment("missing") is None


def test_like_comment(storage) -> None:
    comment = _comment(storage, _issue(storage).id)

    storage.like_comment(comment.id)
    assert storage.like_comment(comment.id).likes == 2
    assert storage.like_comment("missing") is None


def test_flagged_comment_is_hidden_from_thread(storage) -> None:
    issue = _issue(storage)
    comment = _comment(storage, issue.id)

    for _ in range(3):
        flagged = storage.flag_comment(comment.id)

    assert flagged.is_hidden is True
    assert storage.list_comments_by_issue(issue.id) == []
    assert [c.id for c in storage.list_flagged_comments()] == [comment.id]
    assert storage.flag_comment("missing") is None

    restored = storage.set_comment_hidden(comment.id, False)
    assert restored.flag_count == 0
    assert [c.id for c in storage.list_comments_by_issue(issue.id)] == [comment.id]


# Follows


def test_toggle_follow(storage) -> None:
    issue = _issue(storage)

    assert storage.toggle_follow("u-1", issue.id) is True
    assert storage.get_follow_by_user_and_issue("u-1", issue.id) is not None
    assert storage.toggle_follow("u-1", issue.id) is False
    assert storage.get_follow_by_user_and_issue("u-1", issue.id) is None
    assert storage.toggle_follow("u-1", issue.id) is True


def test_create_follow_is_idempotent(storage) -> None:
    issue = _issue(storage)
    data = FollowCreate(issue_id=issue.id, user_id="u-1")

    first = storage.create_follow(data)
    second = storage.create_follow(data)

    assert first.id == second.id
    assert storage.delete_follow("u-1", issue.id) is True
    assert storage.delete_follow("u-1", issue.id) is False


def test_filters_never_return_hidden_issues(storage) -> None:
    hidden = _issue(storage, category="water", latitude=40.0, longitude=-74.0)
    storage.set_issue_hidden(hidden.id, True)

    for criteria in (
        IssueFilter(category="water"),
        IssueFilter(status="reported"),
        IssueFilter(category="water", status="reported"),
        IssueFilter(latitude=40.0, longitude=-74.0, radius=1.0),
        IssueFilter(category="water", status="reported", latitude=40.0, longitude=-74.0, radius=1.0),
    ):
        assert storage.filter_issues(criteria) == []


def test_status_history_entries_are_never_rewritten(storage) -> None:
    issue = _issue(storage)
    storage.update_issue_status(issue.id, "in-progress")
    before = storage.list_status_history(issue.id)

    storage.update_issue_status(issue.id, "resolved")
    storage.update_issue_status(issue.id, "in-progress")
    after = storage.list_status_history(issue.id)

    assert len(after) == len(before) + 2
    assert after[: len(before)] == before
    assert [(e.id, e.created_at, e.description) for e in after[:2]] == [
        (e.id, e.created_at, e.description) for e in before
    ]
