"""Per-client runtimes: one auth context, composer and feed per browser."""

from __future__ import annotations

import logging
import secrets
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

from flask import current_app, session

from community.core.auth.auth_context import AuthContext
from community.core.auth.identity_provider import IdentityProvider, SessionUser
from community.domains.posts.composer import Composer, TextGenerator
from community.domains.posts.feed import FeedSynchronizer
from community.domains.posts.store import PostStore

logger = logging.getLogger(__name__)

CLIENT_ID_SESSION_KEY = "_client_id"


class ClientRuntime:
    """State one browser would hold in memory if it ran the app itself."""

    def __init__(
        self,
        client_id: str,
        *,
        identity: IdentityProvider,
        store: PostStore,
        generator: TextGenerator,
    ) -> None:
        self.client_id = client_id
        self.feed = FeedSynchronizer(store)
        self.composer = Composer(generator)
        self.feed_seen_at: Optional[float] = None
        self.auth = AuthContext(identity, client_id, on_change=self._on_session_changed)
        self.auth.init()

    @property
    def author_label(self) -> Optional[str]:
        session_user = self.auth.current_session
        return session_user.email if session_user else None

    def view_feed(self, now: Optional[float] = None) -> None:
        """Open the feed subscription, or keep it open, for a page view or poll."""
        self.feed_seen_at = time.monotonic() if now is None else now
        self.feed.activate()

    def release_feed(self) -> None:
        self.feed_seen_at = None
        self.feed.deactivate()

    def feed_idle_for(self, now: float) -> Optional[float]:
        if not self.feed.active or self.feed_seen_at is None:
            return None
        return now - self.feed_seen_at

    def _on_session_changed(self, session_user: Optional[SessionUser]) -> None:
        if session_user is None:
            # The feed view is gone once the session is.
            self.release_feed()
            self.composer.clear()

    def close(self) -> None:
        self.release_feed()
        self.auth.close()


class RuntimeRegistry:
    """Process-wide map of client id to runtime, evicting the least recently used."""

    def __init__(self, factory: Callable[[str], ClientRuntime], max_clients: int = 1000) -> None:
        self._factory = factory
        self._max_clients = max(1, max_clients)
        self._runtimes: "OrderedDict[str, ClientRuntime]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, client_id: str) -> ClientRuntime:
        with self._lock:
            runtime = self._runtimes.get(client_id)
            if runtime is not None:
                self._runtimes.move_to_end(client_id)
                return runtime
            runtime = self._factory(client_id)
            self._runtimes[client_id] = runtime
            evicted = []
            while len(self._runtimes) > self._max_clients:
                _, oldest = self._runtimes.popitem(last=False)
                evicted.append(oldest)
        for old in evicted:
            logger.info("Evicting client runtime %s", old.client_id)
            old.close()
        return runtime

    def discard(self, client_id: str) -> None:
        with self._lock:
            runtime = self._runtimes.pop(client_id, None)
        if runtime is not None:
            runtime.close()

    def close_all(self) -> None:
        with self._lock:
            runtimes = list(self._runtimes.values())
            self._runtimes.clear()
        for runtime in runtimes:
            runtime.close()

    def release_idle_feeds(self, max_idle: float, now: Optional[float] = None) -> int:
        """Close feed subscriptions not viewed or polled for ``max_idle`` seconds.

        Browsers that vanish without saying goodbye stop polling; this is what
        eventually drops their subscription. Returns how many were closed.
        """
        now = time.monotonic() if now is None else now
        with self._lock:
            runtimes = list(self._runtimes.values())
        released = 0
        for runtime in runtimes:
            idle = runtime.feed_idle_for(now)
            if idle is not None and idle > max_idle:
                logger.info("Releasing idle feed for client %s after %.0fs", runtime.client_id, idle)
                runtime.release_feed()
                released += 1
        return released

    def __contains__(self, client_id: str) -> bool:
        return client_id in self._runtimes

    def __len__(self) -> int:
        return len(self._runtimes)


def current_client_id() -> str:
    """Stable id for the requesting browser, kept in the signed session cookie."""
    client_id = session.get(CLIENT_ID_SESSION_KEY)
    if not client_id:
        client_id = secrets.token_urlsafe(24)
        session[CLIENT_ID_SESSION_KEY] = client_id
        session.permanent = True
    return client_id


def current_runtime() -> ClientRuntime:
    registry: RuntimeRegistry = current_app.extensions["runtime_registry"]
    return registry.get(current_client_id())


__all__ = [
    "ClientRuntime",
    "RuntimeRegistry",
    "current_client_id",
    "current_runtime",
]
