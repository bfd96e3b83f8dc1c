import logging

import urllib3
from kubernetes.client.exceptions import ApiException

from kube_porthole.core.errors import ClusterQueryError
from kube_porthole.core.types import ALL_NAMESPACES, ForwardablePair, ResourceKind

logger = logging.getLogger(__name__)

REPLICATED_OWNER_KINDS = ("ReplicaSet", "StatefulSet", "DaemonSet")
# port-forwarding only carries TCP
FORWARDABLE_PROTOCOLS = ("TCP",)


def is_forwardable_protocol(protocol):
    return (protocol or "TCP").upper() in FORWARDABLE_PROTOCOLS


def selector_matches(selector, labels):
    """A service selector matches when all of its pairs are in the pod labels, an empty selector matches nothing"""
    if not selector:
        return False
    labels = labels or {}
    return all(labels.get(key) == value for key, value in selector.items())


class EndpointDiscoverer:
    """Endpoint Discovery
    Computes the pod ports worth forwarding in a namespace, from its services and container specs
    """

    def __init__(self, core_api):
        self.core_api = core_api

    def list_namespaces(self):
        try:
            namespaces = self.core_api.list_namespace()
        except (ApiException, urllib3.exceptions.HTTPError) as ex:
            raise ClusterQueryError(f"Failed listing namespaces: {ex}", ex) from ex
        names = [ns.metadata.name for ns in namespaces.items]
        logger.info(f"Found the following namespaces {names}")
        return names

    def list_pods(self, namespace):
        try:
            if namespace == ALL_NAMESPACES:
                return self.core_api.list_pod_for_all_namespaces().items
            return self.core_api.list_namespaced_pod(namespace).items
        except (ApiException, urllib3.exceptions.HTTPError) as ex:
            logger.warning(f"Failed to get pods in namespace {namespace}")
            raise ClusterQueryError(f"Failed listing pods in {namespace}: {ex}", ex) from ex

    def list_services(self, namespace):
        try:
            if namespace == ALL_NAMESPACES:
                return self.core_api.list_service_for_all_namespaces().items
            return self.core_api.list_namespaced_service(namespace).items
        except (ApiException, urllib3.exceptions.HTTPError) as ex:
            logger.warning(f"Failed to get services in namespace {namespace}")
            raise ClusterQueryError(f"Failed listing services in {namespace}: {ex}", ex) from ex

    def discover(self, namespace, skip_namespaces=()):
        """Returns the deduplicated list of forwardable pairs of the namespace

        @param namespace: a namespace name, or ALL_NAMESPACES for a cluster wide discovery
        @param skip_namespaces: pods in these namespaces are ignored
        @raise ClusterQueryError: listing pods or services failed
        """
        pods = self.list_pods(namespace)
        services = self.list_services(namespace)

        pairs = list()
        handled_owners = set()
        for pod in pods:
            if pod.metadata.namespace in skip_namespaces:
                continue
            if not self.is_candidate(pod):
                continue
            owner = self.replicated_owner(pod)
            if owner:
                if owner in handled_owners:
                    logger.debug(f"Skipping pod {pod.metadata.name}, {owner[1]} {owner[2]} is already represented")
                    continue
                handled_owners.add(owner)

            handled_ports = set()
            pairs.extend(self.service_pairs(pod, services, handled_ports))
            pairs.extend(self.container_pairs(pod, handled_ports))

        logger.info(f"Found {len(pairs)} forwardable ports in namespace {namespace}")
        return pairs

    @staticmethod
    def is_candidate(pod):
        if pod.status is None or pod.status.phase != "Running":
            return False
        # has been scheduled for deletion
        return pod.metadata.deletion_timestamp is None

    @staticmethod
    def replicated_owner(pod):
        for owner in pod.metadata.owner_references or []:
            if owner.kind in REPLICATED_OWNER_KINDS:
                return pod.metadata.namespace, owner.kind, owner.name
        return None

    @staticmethod
    def container_ports(pod):
        for container in pod.spec.containers or []:
            for port in container.ports or []:
                yield container, port

    def resolve_target_port(self, pod, service_port):
        target = service_port.target_port
        if target is None:
            return service_port.port
        if isinstance(target, int):
            return target
        if str(target).isdigit():
            return int(target)
        for _, port in self.container_ports(pod):
            if port.name == target:
                return port.container_port
        return None

    def service_pairs(self, pod, services, handled_ports):
        for svc in services:
            if svc.metadata.namespace != pod.metadata.namespace:
                continue
            if not selector_matches(svc.spec.selector, pod.metadata.labels):
                continue
            for service_port in svc.spec.ports or []:
                if not is_forwardable_protocol(service_port.protocol):
                    continue
                target_port = self.resolve_target_port(pod, service_port)
                if target_port is None:
                    logger.debug(
                        f"Could not resolve target port {service_port.target_port} of service {svc.metadata.name} "
                        f"on pod {pod.metadata.name}"
                    )
                    continue
                if target_port in handled_ports:
                    # this port has already been handled by another service so we are safe to skip it
                    logger.debug(f"Skipped port {target_port} for service {svc.metadata.name}, already handled")
                    continue
                handled_ports.add(target_port)
                yield ForwardablePair(
                    namespace=pod.metadata.namespace,
                    pod_name=pod.metadata.name,
                    port=target_port,
                    kind=ResourceKind.SERVICE,
                    resource_name=svc.metadata.name,
                )

    def container_pairs(self, pod, handled_ports):
        for container, port in self.container_ports(pod):
            if not is_forwardable_protocol(port.protocol):
                continue
            if port.container_port in handled_ports:
                continue
            handled_ports.add(port.container_port)
            yield ForwardablePair(
                namespace=pod.metadata.namespace,
                pod_name=pod.metadata.name,
                port=port.container_port,
                kind=ResourceKind.CONTAINER,
                resource_name=container.name,
            )
