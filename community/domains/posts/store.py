"""Post store: live ordered query, inserts with server timestamps, deletes."""

from __future__ import annotations

import itertools
import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Callable, List, Tuple

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from community.core.events import Event, EventBus
from community.domains.posts.events import POSTS_SNAPSHOT
from community.domains.posts.models import Post
from community.domains.posts.schemas import PostDocument
from community.extensions import db

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostSnapshot:
    """One ordered read of the collection.

    ``sequence`` grows with every read, so a reader that started later
    carries a larger number and never sees fewer committed writes.
    """

    sequence: int
    documents: Tuple[PostDocument, ...]


SnapshotListener = Callable[[PostSnapshot], None]


class DocumentStoreError(Exception):
    """Raised when a store read or write fails."""

    pass


class PostStore:
    """The ``post`` collection, newest first.

    After every successful write the whole ordered query is re-read and
    broadcast to subscribers. Broadcasts are serialized so subscribers see
    snapshots in the order the writes committed. A subscriber's initial read
    is not serialized against them; listeners drop any snapshot whose
    sequence is lower than one they already applied.
    """

    def __init__(self, bus: EventBus) -> None:
        self._bus = bus
        self._broadcast_lock = threading.Lock()
        self._sequence = itertools.count(1)
        self._sequence_lock = threading.Lock()

    def snapshot(self) -> List[PostDocument]:
        try:
            rows = Post.query.order_by(Post.created_at.desc(), Post.seq.desc()).all()
        except SQLAlchemyError as exc:
            raise DocumentStoreError("read_failed") from exc
        documents: List[PostDocument] = []
        for row in rows:
            try:
                documents.append(PostDocument.model_validate(row))
            except ValidationError as exc:
                logger.warning("Dropping malformed post %s: %s", row.id, exc)
        return documents

    def read(self) -> PostSnapshot:
        """Take a sequence number, then read; later numbers never see less."""
        with self._sequence_lock:
            sequence = next(self._sequence)
        return PostSnapshot(sequence, tuple(self.snapshot()))

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Deliver the current snapshot now and every later one; returns unsubscribe.

        A write landing between registration and the initial delivery may
        reach the listener first; its snapshot carries the higher sequence.
        """
        unsubscribe = self._bus.subscribe(POSTS_SNAPSHOT, lambda event: listener(event.payload["snapshot"]))
        try:
            listener(self.read())
        except DocumentStoreError:
            logger.exception("Initial posts snapshot failed")
        return unsubscribe

    def add(self, *, title: str, content: str, author: str) -> str:
        """Insert one post; ``created_at`` is filled in by the database."""
        post = Post(id=uuid.uuid4().hex, title=title, content=content, author=author)
        try:
            db.session.add(post)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise DocumentStoreError("write_failed") from exc
        logger.info("Post %s created", post.id)
        self._broadcast()
        return post.id

    def delete(self, post_id: str) -> bool:
        """Delete by id; deleting a missing post is not an error."""
        try:
            deleted = Post.query.filter_by(id=post_id).delete(synchronize_session=False)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise DocumentStoreError("delete_failed") from exc
        logger.info("Post %s deleted (%s row)", post_id, deleted)
        self._broadcast()
        return bool(deleted)

    def _broadcast(self) -> None:
        if not self._bus.subscriber_count(POSTS_SNAPSHOT):
            return
        with self._broadcast_lock:
            try:
                snapshot = self.read()
            except DocumentStoreError:
                logger.exception("Posts snapshot after write failed")
                return
            self._bus.publish(Event(POSTS_SNAPSHOT, {"snapshot": snapshot}))


__all__ = ["DocumentStoreError", "PostSnapshot", "PostStore", "SnapshotListener"]
