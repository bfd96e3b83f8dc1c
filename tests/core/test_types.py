from kube_porthole.core.types import Endpoint, Icon, ResourceKind
from tests.fixtures import FakeTunnel, make_pair


def test_endpoint_from_forward():
    pair = make_pair("grafana-0", 3000, namespace="monitoring", kind=ResourceKind.SERVICE, resource_name="grafana")
    icon = Icon(remote_url="http://localhost:40000/favicon.ico", file_path="/tmp/icon-1.ico", size=10, mime_type="")
    endpoint = Endpoint.from_forward(pair, FakeTunnel(40000), icon, "Grafana")

    assert endpoint.url == "http://localhost:40000"
    assert endpoint.kind == ResourceKind.SERVICE
    assert endpoint.to_dict() == {
        "localPort": 40000,
        "podPort": 3000,
        "title": "Grafana",
        "iconUrl": "file:///tmp/icon-1.ico",
        "iconRemoteUrl": "http://localhost:40000/favicon.ico",
        "namespace": "monitoring",
        "podName": "grafana-0",
    }


def test_endpoint_title_falls_back_to_pod_name():
    endpoint = Endpoint.from_forward(make_pair(), FakeTunnel(40000), None, "")
    assert endpoint.title == "web-0"
    assert endpoint.icon_url == ""


def test_endpoint_stop():
    endpoint = Endpoint.from_forward(make_pair(), FakeTunnel(40000), None, "")
    assert endpoint.is_live
    endpoint.stop()
    assert not endpoint.is_live


def test_pair_location():
    assert make_pair().location() == "default/web-0:8080"
