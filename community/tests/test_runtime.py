from unittest import mock

import pytest

from community.core.runtime import ClientRuntime, RuntimeRegistry
from community.domains.posts.events import POSTS_SNAPSHOT

pytestmark = pytest.mark.integration


def _fake_runtime(client_id):
    runtime = mock.Mock(spec=ClientRuntime)
    runtime.client_id = client_id
    return runtime


def test_registry_reuses_runtime_per_client():
    registry = RuntimeRegistry(_fake_runtime, max_clients=5)

    assert registry.get("a") is registry.get("a")
    assert registry.get("a") is not registry.get("b")
    assert len(registry) == 2


def test_registry_evicts_least_recently_used():
    registry = RuntimeRegistry(_fake_runtime, max_clients=2)
    first = registry.get("a")
    registry.get("b")
    registry.get("a")
    registry.get("c")

    assert "b" not in registry
    assert "a" in registry
    assert not first.close.called


def test_close_all_closes_every_runtime():
    registry = RuntimeRegistry(_fake_runtime)
    runtimes = [registry.get(name) for name in ("a", "b")]

    registry.close_all()

    assert len(registry) == 0
    for runtime in runtimes:
        runtime.close.assert_called_once_with()


def test_sign_out_tears_down_the_feed(app, identity, store, generator, bus):
    runtime = ClientRuntime("client-1", identity=identity, store=store, generator=generator)
    identity.sign_up("client-1", "alice@example.com", "secret123")
    runtime.feed.activate()
    runtime.composer.update(title="Draft")
    assert runtime.author_label == "alice@example.com"

    identity.sign_out("client-1")

    assert not runtime.feed.active
    assert runtime.composer.title == ""
    assert runtime.author_label is None
    assert bus.subscriber_count(POSTS_SNAPSHOT) == 0
    runtime.close()


def test_idle_feeds_are_released(app, bus):
    registry = app.extensions["runtime_registry"]
    idle = registry.get("idle-client")
    polling = registry.get("polling-client")
    idle.view_feed(now=100.0)
    polling.view_feed(now=125.0)

    assert registry.release_idle_feeds(30, now=131.0) == 1

    assert not idle.feed.active
    assert polling.feed.active
    assert bus.subscriber_count(POSTS_SNAPSHOT) == 1
    assert registry.release_idle_feeds(30, now=131.0) == 0


def test_feed_reopens_after_idle_release(app, store):
    runtime = app.extensions["runtime_registry"].get("client-1")
    runtime.view_feed(now=0.0)
    app.extensions["runtime_registry"].release_idle_feeds(30, now=60.0)

    post_id = store.add(title="Missed", content="<p>x</p>", author="bob@example.com")
    runtime.view_feed()

    assert [p.id for p in runtime.feed.posts] == [post_id]
