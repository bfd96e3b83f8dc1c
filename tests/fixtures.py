from types import SimpleNamespace

from kube_porthole.core.types import Endpoint, ForwardablePair, ResourceKind


def make_pod(
    name, namespace="default", labels=None, ports=(), owner=None, phase="Running", deleted=False, container=None
):
    """ports is a list of (name, container port) or (name, container port, protocol) tuples"""
    container_ports = [
        SimpleNamespace(name=port[0], container_port=port[1], protocol=port[2] if len(port) > 2 else "TCP")
        for port in ports
    ]
    owner_references = [SimpleNamespace(kind=owner[0], name=owner[1])] if owner else None
    return SimpleNamespace(
        metadata=SimpleNamespace(
            name=name,
            namespace=namespace,
            labels=labels or {},
            owner_references=owner_references,
            deletion_timestamp="2020-01-01T00:00:00Z" if deleted else None,
        ),
        status=SimpleNamespace(phase=phase),
        spec=SimpleNamespace(containers=[SimpleNamespace(name=container or name, ports=container_ports)]),
    )


def make_service(name, namespace="default", selector=None, ports=()):
    """ports is a list of (port, target port) or (port, target port, protocol) tuples"""
    service_ports = [
        SimpleNamespace(port=port[0], target_port=port[1], protocol=port[2] if len(port) > 2 else "TCP")
        for port in ports
    ]
    return SimpleNamespace(
        metadata=SimpleNamespace(name=name, namespace=namespace),
        spec=SimpleNamespace(selector=selector, ports=service_ports),
    )


def make_pair(pod_name="web-0", port=8080, namespace="default", kind=ResourceKind.CONTAINER, resource_name=None):
    return ForwardablePair(
        namespace=namespace, pod_name=pod_name, port=port, kind=kind, resource_name=resource_name or pod_name
    )


class FakeTunnel:
    def __init__(self, local_port):
        self.local_port = local_port
        self.stopped = False

    @property
    def is_stopped(self):
        return self.stopped

    def stop(self):
        self.stopped = True


def make_endpoint(pair, local_port, title="title"):
    return Endpoint.from_forward(pair, FakeTunnel(local_port), None, title)
