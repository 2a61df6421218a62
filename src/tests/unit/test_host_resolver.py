import logging

from cluster_client import ExtendedHostResolver, HostDescription, SimpleHostResolver


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def endpoints(*addresses):
    return {"endpoints": [{"endpoint": f"tcp://{a}"} for a in addresses], "error": False, "code": 200}


def addresses(hosts):
    return [str(h.description) for h in hosts.hosts_list]


def test_simple_resolver_returns_fixed_set(make_hosts):
    hosts = make_hosts("a:1", "b:1")
    resolver = SimpleHostResolver(hosts)
    assert resolver.get_hosts() is hosts
    resolver.close()
    assert resolver.get_hosts() is hosts


def test_extended_resolver_merges_discovered_hosts(cluster, make_hosts):
    hosts = make_hosts("a:1")
    a = hosts.hosts_list[0]
    cluster.answer("a:1", body=endpoints("a:1", "b:1", "c:1"))

    resolver = ExtendedHostResolver(hosts, acquire_host_list_interval=60, clock=FakeClock())
    assert addresses(resolver.get_hosts()) == ["a:1", "b:1", "c:1"]
    assert resolver.get_hosts().hosts_list[0] is a
    request = cluster.connections["a:1"].requests[0]
    assert request.url_path == "/_db/_system/_api/cluster/endpoints"


def test_extended_resolver_throttles_refresh(cluster, make_hosts):
    clock = FakeClock()
    cluster.answer("a:1", body=endpoints("a:1"))
    resolver = ExtendedHostResolver(make_hosts("a:1"), acquire_host_list_interval=60, clock=clock)

    resolver.get_hosts()
    resolver.get_hosts()
    clock.now += 59
    resolver.get_hosts()
    assert cluster.attempts("a:1") == 1

    clock.now += 1
    resolver.get_hosts()
    assert cluster.attempts("a:1") == 2


def test_extended_resolver_evicts_hosts_no_longer_reported(cluster, make_hosts):
    clock = FakeClock()
    hosts = make_hosts("a:1", "b:1")
    cluster.answer("a:1", body=endpoints("a:1", "b:1"))
    resolver = ExtendedHostResolver(hosts, acquire_host_list_interval=60, clock=clock)
    resolver.get_hosts()
    b = hosts.get_host(HostDescription.parse("b:1"))

    cluster.answer("a:1", body=endpoints("a:1"))
    clock.now += 60
    assert addresses(resolver.get_hosts()) == ["a:1"]
    assert b.is_closed


def test_extended_resolver_survives_discovery_failure(cluster, make_hosts, caplog):
    cluster.down("a:1")
    cluster.down("b:1")
    hosts = make_hosts("a:1", "b:1")
    resolver = ExtendedHostResolver(hosts, acquire_host_list_interval=60, clock=FakeClock())

    with caplog.at_level(logging.WARNING):
        assert resolver.get_hosts() is hosts
    assert addresses(hosts) == ["a:1", "b:1"]
    assert "Failed to acquire host list" in caplog.text
    assert resolver.last_update == 1000.0


def test_extended_resolver_asks_next_host_when_first_is_down(cluster, make_hosts):
    cluster.down("a:1")
    cluster.answer("b:1", body=endpoints("a:1", "b:1", "d:1"))
    hosts = make_hosts("a:1", "b:1")
    resolver = ExtendedHostResolver(hosts, clock=FakeClock())
    assert addresses(resolver.get_hosts()) == ["a:1", "b:1", "d:1"]


def test_extended_resolver_treats_forbidden_as_no_endpoints(cluster, make_hosts):
    cluster.answer("a:1", status=403, body={"error": True, "code": 403, "errorNum": 11})
    hosts = make_hosts("a:1", "b:1")
    resolver = ExtendedHostResolver(hosts, clock=FakeClock())
    assert addresses(resolver.get_hosts()) == ["a:1", "b:1"]


def test_extended_resolver_skips_endpoints_without_port(cluster, make_hosts):
    cluster.answer("a:1", body={"endpoints": [{"endpoint": "tcp://a:1"}, {"endpoint": "tcp://nowhere"}]})
    resolver = ExtendedHostResolver(make_hosts("a:1"), clock=FakeClock())
    assert addresses(resolver.get_hosts()) == ["a:1"]


def test_extended_resolver_ignores_unreadable_answers(cluster, make_hosts):
    cluster.answer("a:1", body={"unexpected": []})
    hosts = make_hosts("a:1")
    resolver = ExtendedHostResolver(hosts, clock=FakeClock())
    assert resolver.get_hosts() is hosts
    assert addresses(hosts) == ["a:1"]


def test_closed_extended_resolver_stops_refreshing(cluster, make_hosts):
    clock = FakeClock()
    cluster.answer("a:1", body=endpoints("a:1"))
    resolver = ExtendedHostResolver(make_hosts("a:1"), acquire_host_list_interval=1, clock=clock)
    resolver.get_hosts()
    resolver.close()
    clock.now += 10
    resolver.get_hosts()
    assert cluster.attempts("a:1") == 1
