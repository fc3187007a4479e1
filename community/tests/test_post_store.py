from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

from community.domains.posts.events import POSTS_SNAPSHOT
from community.domains.posts.models import Post
from community.domains.posts.store import DocumentStoreError
from community.extensions import db

pytestmark = pytest.mark.integration


def _insert(post_id, created_at, **fields):
    row = Post(
        id=post_id,
        title=fields.get("title", post_id),
        content=fields.get("content", "<p>body</p>"),
        author=fields.get("author", "alice@example.com"),
        created_at=created_at,
    )
    db.session.add(row)
    db.session.commit()
    return row


def test_add_stamps_server_time(store):
    post_id = store.add(title="Hello", content="<p>Hi</p>", author="alice@example.com")

    [document] = store.snapshot()
    assert document.id == post_id
    assert document.title == "Hello"
    assert document.author == "alice@example.com"
    assert document.created_at is not None
    assert document.created_at.tzinfo is not None


def test_snapshot_is_newest_first(store):
    _insert("older", datetime(2026, 10, 1, 9, 0))
    _insert("newest", datetime(2026, 10, 3, 9, 0))
    _insert("middle", datetime(2026, 10, 2, 9, 0))

    assert [d.id for d in store.snapshot()] == ["newest", "middle", "older"]


def test_same_timestamp_puts_later_insert_first(store):
    stamp = datetime(2026, 10, 1, 9, 0)
    _insert("first", stamp)
    _insert("second", stamp)

    assert [d.id for d in store.snapshot()] == ["second", "first"]


def test_naive_timestamps_read_back_as_utc(store):
    _insert("p1", datetime(2026, 10, 1, 9, 0))

    [document] = store.snapshot()
    assert document.created_at == datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)


def test_malformed_rows_are_dropped(store):
    _insert("", datetime(2026, 10, 1, 9, 0))
    _insert("good", datetime(2026, 10, 2, 9, 0))

    assert [d.id for d in store.snapshot()] == ["good"]


def test_blank_author_reads_as_anonymous(store):
    _insert("p1", datetime(2026, 10, 1, 9, 0), author="  ")

    assert store.snapshot()[0].author == "Anonymous"


def test_subscribe_delivers_now_and_after_each_write(store, bus):
    snapshots = []
    unsubscribe = store.subscribe(snapshots.append)
    assert [s.documents for s in snapshots] == [()]

    post_id = store.add(title="Hello", content="<p>Hi</p>", author="a@example.com")
    store.delete(post_id)

    assert [[d.id for d in s.documents] for s in snapshots] == [[], [post_id], []]
    assert [s.sequence for s in snapshots] == sorted({s.sequence for s in snapshots})

    unsubscribe()
    assert bus.subscriber_count(POSTS_SNAPSHOT) == 0
    store.add(title="Later", content="<p>x</p>", author="a@example.com")
    assert len(snapshots) == 3


def test_deleting_missing_post_is_not_an_error(store):
    assert store.delete("does-not-exist") is False


def test_write_failure_raises_and_broadcasts_nothing(store, monkeypatch):
    snapshots = []
    store.subscribe(snapshots.append)

    def boom():
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(db.session, "commit", boom)
    with pytest.raises(DocumentStoreError):
        store.add(title="Hello", content="<p>Hi</p>", author="a@example.com")
    with pytest.raises(DocumentStoreError):
        store.delete("anything")

    assert len(snapshots) == 1


def test_later_reads_carry_higher_sequences(store):
    first = store.read()
    post_id = store.add(title="Hello", content="<p>Hi</p>", author="a@example.com")
    second = store.read()

    assert second.sequence > first.sequence
    assert first.documents == ()
    assert [d.id for d in second.documents] == [post_id]
