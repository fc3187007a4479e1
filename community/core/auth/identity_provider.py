"""Identity provider: accounts, per-client sign-in state and session change events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from community.core.auth.events import AUTH_SESSION_CHANGED
from community.core.auth.models import AuthSession, User
from community.core.auth.password import hash_password, meets_policy, verify_password
from community.core.auth.schemas import CredentialsRequest
from community.core.events import Event, EventBus
from community.extensions import db

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD_MIN_LENGTH = 6


@dataclass(frozen=True)
class SessionUser:
    """Read-only mirror of a signed-in account."""

    id: int
    email: str


SessionListener = Callable[[Optional[SessionUser]], None]


class IdentityError(Exception):
    """Raised when the provider rejects an identity operation.

    ``code`` is a stable key suitable for API responses
    (``invalid_credentials``, ``email_already_exists``, ...).
    """

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code


class IdentityProvider:
    """Signs browser clients in and out and tells listeners when that changes."""

    def __init__(self, bus: EventBus, *, password_min_length: int = DEFAULT_PASSWORD_MIN_LENGTH) -> None:
        self._bus = bus
        self.password_min_length = password_min_length

    def sign_up(self, client_id: str, email: str, password: str) -> SessionUser:
        """Create an account and sign the client into it."""
        credentials = self._parse_credentials(email, password)
        if not meets_policy(credentials.password, self.password_min_length):
            raise IdentityError("weak_password")
        existing = User.query.filter(func.lower(User.email) == credentials.email).first()
        if existing:
            raise IdentityError("email_already_exists")

        user = User(email=credentials.email, password_hash=hash_password(credentials.password))
        try:
            db.session.add(user)
            db.session.flush()
            self._attach(client_id, user)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise IdentityError("sign_up_failed") from exc
        return self._announce(client_id, SessionUser(id=user.id, email=user.email))

    def sign_in(self, client_id: str, email: str, password: str) -> SessionUser:
        try:
            credentials = self._parse_credentials(email, password)
        except IdentityError:
            raise IdentityError("invalid_credentials") from None
        user = User.query.filter(func.lower(User.email) == credentials.email).first()
        if not verify_password(credentials.password, user.password_hash if user else None):
            raise IdentityError("invalid_credentials")
        try:
            self._attach(client_id, user)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise IdentityError("sign_in_failed") from exc
        return self._announce(client_id, SessionUser(id=user.id, email=user.email))

    def sign_out(self, client_id: str) -> None:
        try:
            AuthSession.query.filter_by(client_id=client_id).delete(synchronize_session=False)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise IdentityError("sign_out_failed") from exc
        self._announce(client_id, None)

    def current_session(self, client_id: str) -> Optional[SessionUser]:
        record = AuthSession.query.filter_by(client_id=client_id).first()
        if not record:
            return None
        user = db.session.get(User, record.user_id)
        if not user:
            return None
        return SessionUser(id=user.id, email=user.email)

    def on_session_changed(self, client_id: str, listener: SessionListener) -> Callable[[], None]:
        """Register ``listener`` for one client; returns the unsubscribe callable.

        The listener receives the current state right away, then every change.
        """

        def _deliver(event: Event) -> None:
            if event.payload.get("client_id") == client_id:
                listener(event.payload.get("session"))

        unsubscribe = self._bus.subscribe(AUTH_SESSION_CHANGED, _deliver)
        try:
            initial = self.current_session(client_id)
        except SQLAlchemyError:
            # Listener stays registered; the next change event will reach it.
            logger.exception("Could not read session state for client %s", client_id)
            return unsubscribe
        listener(initial)
        return unsubscribe

    # --- helpers ---

    def _parse_credentials(self, email: str, password: str) -> CredentialsRequest:
        try:
            return CredentialsRequest.model_validate({"email": email or "", "password": password or ""})
        except ValidationError:
            raise IdentityError("invalid_email") from None

    def _attach(self, client_id: str, user: User) -> None:
        record = AuthSession.query.filter_by(client_id=client_id).first()
        if record:
            record.user_id = user.id
        else:
            db.session.add(AuthSession(client_id=client_id, user_id=user.id))

    def _announce(self, client_id: str, session: Optional[SessionUser]) -> Optional[SessionUser]:
        logger.info("Session changed for client %s: user=%s", client_id, session.id if session else None)
        self._bus.publish(Event(AUTH_SESSION_CHANGED, {"client_id": client_id, "session": session}))
        return session


__all__ = ["IdentityError", "IdentityProvider", "SessionUser"]
