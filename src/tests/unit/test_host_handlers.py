import random

import pytest

from cluster_client import (
    AccessType,
    ConnectivityError,
    DirtyReadHostHandler,
    ExhaustedRetriesError,
    FallbackHostHandler,
    HostDescription,
    HostHandle,
    PinnedHostHandler,
    RandomHostHandler,
    RoundRobinHostHandler,
    SimpleHostResolver,
)


def failure(n=0):
    return ConnectivityError(f"host-{n}", reason="Connection refused")


def drain(handler):
    attempts = 0
    while handler.has_next():
        handler.get()
        attempts += 1
        handler.fail(failure(attempts))
    return attempts


# ── Round robin ──────────────────────────────────────────────────


def test_round_robin_rotates(make_hosts):
    handler = RoundRobinHostHandler(SimpleHostResolver(make_hosts("a:1", "b:1", "c:1")))
    seen = [str(handler.get().description) for _ in range(4)]
    assert seen == ["a:1", "b:1", "c:1", "a:1"]


def test_round_robin_honors_sticky_hint(make_hosts):
    handler = RoundRobinHostHandler(SimpleHostResolver(make_hosts("a:1", "b:1", "c:1")))
    handle = HostHandle(HostDescription.parse("c:1"))
    assert str(handler.get(handle).description) == "c:1"
    assert str(handler.get(handle).description) == "c:1"
    assert str(handler.get().description) == "a:1"


def test_round_robin_exhausts_after_three_passes(make_hosts):
    handler = RoundRobinHostHandler(SimpleHostResolver(make_hosts("a:1", "b:1")))
    assert drain(handler) == 6
    with pytest.raises(ExhaustedRetriesError) as exc_info:
        handler.get()
    assert len(exc_info.value.causes) == 6
    assert handler.has_next()


def test_round_robin_fail_if_not_match(make_hosts):
    handler = RoundRobinHostHandler(SimpleHostResolver(make_hosts("a:1", "b:1")))
    handler.get()
    handler.fail_if_not_match(HostDescription.parse("a:1"), failure())
    assert handler.causes == ()
    handler.fail_if_not_match(HostDescription.parse("b:1"), failure())
    assert len(handler.causes) == 1


# ── Random ───────────────────────────────────────────────────────


def test_random_keeps_its_host_while_it_answers(make_hosts):
    handler = RandomHostHandler(SimpleHostResolver(make_hosts("a:1", "b:1", "c:1")), rng=random.Random(7))
    first = handler.get()
    handler.success()
    assert handler.get() is first


def test_random_moves_to_a_different_host_on_failure(make_hosts):
    handler = RandomHostHandler(SimpleHostResolver(make_hosts("a:1", "b:1", "c:1")), rng=random.Random(3))
    for n in range(5):
        before = handler.get()
        handler.fail(failure(n))
        assert handler.get() is not before


def test_random_exhausts_after_three_passes(make_hosts):
    handler = RandomHostHandler(SimpleHostResolver(make_hosts("a:1", "b:1", "c:1")), rng=random.Random(1))
    assert drain(handler) == 9
    with pytest.raises(ExhaustedRetriesError):
        handler.get()


def test_random_reset_keeps_current(make_hosts):
    handler = RandomHostHandler(SimpleHostResolver(make_hosts("a:1", "b:1")), rng=random.Random(5))
    handler.fail(failure())
    current = handler.current
    handler.reset()
    assert handler.current is current
    assert handler.causes == ()


def test_random_honors_sticky_hint(make_hosts):
    handler = RandomHostHandler(SimpleHostResolver(make_hosts("a:1", "b:1", "c:1")), rng=random.Random(2))
    for address in ("a:1", "b:1", "c:1"):
        handle = HostHandle(HostDescription.parse(address))
        assert str(handler.get(handle).description) == address
        assert str(handler.get().description) == address

    current = handler.current
    assert handler.get(HostHandle(HostDescription.parse("z:1"))) is current


# ── Pinned ───────────────────────────────────────────────────────


def test_pinned_never_leaves_its_host(make_hosts):
    handler = PinnedHostHandler(SimpleHostResolver(make_hosts("a:1", "b:1")))
    seen = set()
    while handler.has_next():
        seen.add(str(handler.get().description))
        handler.fail(failure())
    assert seen == {"a:1"}
    with pytest.raises(ExhaustedRetriesError) as exc_info:
        handler.get()
    assert len(exc_info.value.causes) == 3


def test_pinned_to_configured_host(make_hosts):
    handler = PinnedHostHandler(SimpleHostResolver(make_hosts("a:1", "b:1")), pinned=HostDescription.parse("b:1"))
    assert str(handler.get().description) == "b:1"


def test_pinned_follows_hint_and_repins_on_success(make_hosts):
    handler = PinnedHostHandler(SimpleHostResolver(make_hosts("a:1", "b:1")))
    assert str(handler.get(HostHandle(HostDescription.parse("b:1"))).description) == "b:1"
    handler.success()
    assert str(handler.get().description) == "b:1"
    assert str(handler.pinned.description) == "b:1"


# ── Dirty read ───────────────────────────────────────────────────


def test_dirty_read_routes_by_access_type(make_hosts):
    resolver = SimpleHostResolver(make_hosts("a:1", "b:1"))
    leader = FallbackHostHandler(resolver)
    follower = PinnedHostHandler(resolver, pinned=HostDescription.parse("b:1"))
    handler = DirtyReadHostHandler(leader, follower)

    assert str(handler.get(None, AccessType.WRITE).description) == "a:1"
    assert str(handler.get(None, AccessType.DIRTY_READ).description) == "b:1"

    # Failure goes to the handler that served the last get
    handler.fail(failure())
    assert len(follower.causes) == 1
    assert leader.causes == ()

    handler.get(None, AccessType.READ)
    handler.fail(failure())
    assert len(leader.causes) == 1


def test_dirty_read_close_closes_hosts_once(cluster, make_hosts):
    hosts = make_hosts("a:1")
    hosts.hosts_list[0].connection()
    resolver = SimpleHostResolver(hosts)
    handler = DirtyReadHostHandler(FallbackHostHandler(resolver), RandomHostHandler(resolver))
    handler.close()
    assert cluster.connections["a:1"].close_calls == 1
