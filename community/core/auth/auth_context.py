"""Auth context: the application's read-only mirror of the client's session."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from community.core.auth.identity_provider import IdentityProvider, SessionUser

logger = logging.getLogger(__name__)


class AuthContext:
    """Exposes ``current_session`` and ``loading`` to the views of one client.

    ``loading`` starts out ``True`` and is cleared by the first session event;
    it never goes back to ``True``. Exactly one provider listener is held,
    however many times ``init`` is called.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        client_id: str,
        on_change: Optional[Callable[[Optional[SessionUser]], None]] = None,
    ) -> None:
        self._identity = identity
        self.client_id = client_id
        self._on_change = on_change
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.current_session: Optional[SessionUser] = None
        self.loading = True

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    @property
    def is_authenticated(self) -> bool:
        return self.current_session is not None

    def init(self) -> None:
        if self._unsubscribe is not None:
            return
        # Provider delivers the current state during registration.
        self._unsubscribe = self._identity.on_session_changed(self.client_id, self._handle)

    def close(self) -> None:
        if self._unsubscribe is None:
            return
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        unsubscribe()

    def _handle(self, session: Optional[SessionUser]) -> None:
        self.current_session = session
        self.loading = False
        if self._on_change is not None:
            self._on_change(session)


__all__ = ["AuthContext"]
