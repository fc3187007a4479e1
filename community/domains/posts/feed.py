"""Feed synchronizer: mirrors the live post query and forwards mutations."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Tuple

from community.core.utils.html import is_blank, is_blank_markup
from community.domains.posts.schemas import ANONYMOUS_AUTHOR, PostDocument
from community.domains.posts.store import PostSnapshot, PostStore

logger = logging.getLogger(__name__)


class FeedSynchronizer:
    """Holds one live subscription while active.

    The feed is only ever replaced by snapshots from the store; ``create`` and
    ``delete`` never touch it, the resulting snapshot does.
    """

    def __init__(self, store: PostStore) -> None:
        self._store = store
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._posts: Tuple[PostDocument, ...] = ()
        self._version = 0
        self._sequence = 0
        self._lock = threading.Lock()
        self._subscription_lock = threading.Lock()

    @property
    def posts(self) -> Tuple[PostDocument, ...]:
        return self._posts

    @property
    def version(self) -> int:
        return self._version

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def activate(self) -> None:
        # Tabs sharing a session poll concurrently; only one may subscribe.
        with self._subscription_lock:
            if self._unsubscribe is not None:
                return
            self._unsubscribe = self._store.subscribe(self._on_snapshot)

    def deactivate(self) -> None:
        with self._subscription_lock:
            if self._unsubscribe is None:
                return
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()

    def _on_snapshot(self, snapshot: PostSnapshot) -> None:
        with self._lock:
            if snapshot.sequence <= self._sequence:
                logger.debug("Skipping stale posts snapshot %s", snapshot.sequence)
                return
            self._sequence = snapshot.sequence
            self._posts = snapshot.documents
            self._version += 1

    def create(self, title: str, content: str, author_label: Optional[str] = None) -> str:
        """Insert a post and return its id.

        Raises:
            ValueError: ``validation_error`` when the title or the visible text
                of the body is blank; the store is not called
            DocumentStoreError: If the insert fails
        """
        if is_blank(title) or is_blank_markup(content):
            raise ValueError("validation_error")
        author = (author_label or "").strip() or ANONYMOUS_AUTHOR
        return self._store.add(title=title.strip(), content=content, author=author)

    def delete(self, post_id: str, confirm: Callable[[], bool]) -> bool:
        """Delete after ``confirm()`` agrees; returns whether a delete was issued.

        Raises:
            DocumentStoreError: If the delete fails; the post stays in the feed
        """
        if not confirm():
            logger.debug("Delete of post %s cancelled", post_id)
            return False
        self._store.delete(post_id)
        return True


__all__ = ["FeedSynchronizer"]
