import pytest

from community.core.auth.auth_context import AuthContext
from community.core.auth.events import AUTH_SESSION_CHANGED

pytestmark = pytest.mark.integration


def test_loading_until_first_event(identity):
    context = AuthContext(identity, "client-1")
    assert context.loading is True
    assert context.current_session is None

    context.init()

    assert context.loading is False
    assert context.current_session is None
    assert context.is_authenticated is False


def test_init_holds_a_single_listener(identity, bus):
    context = AuthContext(identity, "client-1")
    before = bus.subscriber_count(AUTH_SESSION_CHANGED)

    context.init()
    context.init()

    assert bus.subscriber_count(AUTH_SESSION_CHANGED) == before + 1
    assert context.subscribed


def test_session_changes_are_mirrored(identity):
    changes = []
    context = AuthContext(identity, "client-1", on_change=changes.append)
    context.init()

    identity.sign_up("client-1", "alice@example.com", "secret123")
    assert context.current_session.email == "alice@example.com"

    identity.sign_out("client-1")
    assert context.current_session is None
    assert context.loading is False
    assert [c.email if c else None for c in changes] == [None, "alice@example.com", None]


def test_other_clients_do_not_leak_in(identity):
    context = AuthContext(identity, "client-1")
    context.init()

    identity.sign_up("client-2", "bob@example.com", "secret123")

    assert context.current_session is None


def test_close_unsubscribes(identity, bus):
    context = AuthContext(identity, "client-1")
    context.init()
    count = bus.subscriber_count(AUTH_SESSION_CHANGED)

    context.close()
    context.close()

    assert bus.subscriber_count(AUTH_SESSION_CHANGED) == count - 1
    identity.sign_up("client-1", "alice@example.com", "secret123")
    assert context.current_session is None
