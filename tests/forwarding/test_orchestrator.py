import itertools
import threading
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from kube_porthole.conf import Config, set_config
from kube_porthole.core.errors import IconResolutionError, TunnelTimeoutError
from kube_porthole.core.types import Icon, ResourceKind
from kube_porthole.modules.forwarding.orchestrator import ForwardOrchestrator
from tests.fixtures import FakeTunnel, make_pair

set_config(Config())

cluster = SimpleNamespace(config_path="/kubeconfig", name="test", api_client=None, core_api=None)


class FakeOpener:
    """Hands out fake tunnels, pairs whose port is in timeout_ports never become ready"""

    def __init__(self, timeout_ports=()):
        self.timeout_ports = timeout_ports
        self.ports = itertools.count(40000)
        self.tunnels = list()
        self._lock = threading.Lock()

    def __call__(self, pair, cluster):
        if pair.port in self.timeout_ports:
            raise TunnelTimeoutError(pair.pod_name, pair.port, 0.1)
        with self._lock:
            tunnel = FakeTunnel(next(self.ports))
            self.tunnels.append(tunnel)
        return tunnel


class FakeIconResolver:
    def __init__(self, failing_ports=()):
        self.failing_ports = failing_ports

    def resolve(self, base_url):
        local_port = int(base_url.rsplit(":", 1)[1])
        if local_port in self.failing_ports:
            raise IconResolutionError(f"no icons at {base_url}")
        icon = Icon(remote_url=f"{base_url}/favicon.ico", file_path=f"/tmp/icon-{local_port}.ico", size=10, mime_type="")
        return icon, f"site on {local_port}"


def test_build_forwards_every_pair():
    opener = FakeOpener()
    orchestrator = ForwardOrchestrator(icon_resolver=FakeIconResolver(), tunnel_opener=opener)
    pairs = [make_pair(pod_name=f"web-{i}", port=8080 + i) for i in range(5)]

    endpoints = orchestrator.build("default", pairs, cluster)

    assert sorted(endpoint.pod_port for endpoint in endpoints) == [8080, 8081, 8082, 8083, 8084]
    assert len({endpoint.local_port for endpoint in endpoints}) == 5
    for endpoint in endpoints:
        assert endpoint.title == f"site on {endpoint.local_port}"
        assert endpoint.icon_url == f"file:///tmp/icon-{endpoint.local_port}.ico"
        assert endpoint.icon_remote_url == f"http://localhost:{endpoint.local_port}/favicon.ico"
        assert endpoint.is_live


def test_tunnel_timeout_drops_only_that_pair(caplog):
    opener = FakeOpener(timeout_ports=(9999,))
    orchestrator = ForwardOrchestrator(icon_resolver=FakeIconResolver(), tunnel_opener=opener)
    pairs = [make_pair(port=8080), make_pair(port=9999), make_pair(pod_name="api-0", port=3000)]

    endpoints = orchestrator.build("default", pairs, cluster)

    assert sorted(endpoint.pod_port for endpoint in endpoints) == [3000, 8080]
    timeouts = [record for record in caplog.records if "timed out" in record.getMessage()]
    assert len(timeouts) == 1


def test_icon_failure_drops_endpoint_and_closes_tunnel():
    opener = FakeOpener()
    orchestrator = ForwardOrchestrator(
        icon_resolver=FakeIconResolver(failing_ports=(40000,)), tunnel_opener=opener, drop_on_icon_failure=True
    )

    assert orchestrator.forward(make_pair(), cluster) is None
    assert opener.tunnels[0].stopped


def test_icon_failure_keeps_endpoint_when_configured():
    opener = FakeOpener()
    orchestrator = ForwardOrchestrator(
        icon_resolver=FakeIconResolver(failing_ports=(40000,)), tunnel_opener=opener, drop_on_icon_failure=False
    )

    endpoint = orchestrator.forward(make_pair(kind=ResourceKind.SERVICE, resource_name="web-svc"), cluster)

    assert endpoint.title == "web-0"
    assert endpoint.icon_url == ""
    assert endpoint.icon_remote_url == ""
    assert endpoint.kind == ResourceKind.SERVICE
    assert not opener.tunnels[0].stopped


def test_icon_failure_policy_defaults_to_config():
    set_config(Config(drop_on_icon_failure=False))
    try:
        assert not ForwardOrchestrator(icon_resolver=MagicMock()).should_drop_on_icon_failure()
    finally:
        set_config(Config())
    assert ForwardOrchestrator(icon_resolver=MagicMock()).should_drop_on_icon_failure()


def test_unexpected_errors_close_tunnel():
    opener = FakeOpener()
    icon_resolver = MagicMock()
    icon_resolver.resolve.side_effect = RuntimeError("boom")
    orchestrator = ForwardOrchestrator(icon_resolver=icon_resolver, tunnel_opener=opener)

    with pytest.raises(RuntimeError):
        orchestrator.forward(make_pair(), cluster)
    assert opener.tunnels[0].stopped

    # a failing worker does not break the other pairs
    assert orchestrator.build("default", [make_pair()], cluster) == []


def test_build_without_pairs():
    orchestrator = ForwardOrchestrator(icon_resolver=FakeIconResolver(), tunnel_opener=FakeOpener())
    assert orchestrator.build("default", [], cluster) == []
