import logging

from kube_porthole.core.types import ALL_NAMESPACES
from kube_porthole.modules.discovery.endpoints import EndpointDiscoverer
from kube_porthole.modules.forwarding.orchestrator import ForwardOrchestrator

logger = logging.getLogger(__name__)


class SessionState:
    """Tracks the active namespaces and the endpoints forwarded for them

    Not thread safe, at most one activate/deactivate/shutdown_all call may run at a time.
    """

    def __init__(self, orchestrator=None, discoverer_factory=EndpointDiscoverer):
        self.orchestrator = orchestrator or ForwardOrchestrator()
        self.discoverer_factory = discoverer_factory
        self._active = list()
        # pod namespace -> endpoints
        self._endpoints = dict()

    @property
    def active_namespaces(self):
        return list(self._active)

    def is_active(self, namespace):
        return namespace in self._active

    def is_covered(self, namespace):
        if namespace in self._active:
            return True
        return namespace != ALL_NAMESPACES and ALL_NAMESPACES in self._active

    def endpoints(self, namespace=None):
        if namespace is None or namespace == ALL_NAMESPACES:
            return [endpoint for endpoints in self._endpoints.values() for endpoint in endpoints]
        return list(self._endpoints.get(namespace, []))

    def activate(self, namespace, cluster):
        """Makes sure every website of the namespace is forwarded and returns its endpoints

        @raise ClusterQueryError: discovery failed, the namespace is not activated
        """
        if self.is_covered(namespace):
            logger.info(
                f"Skipping discovery for namespace {namespace} as already in active namespaces {self._active}"
            )
            if namespace not in self._active:
                self._active.append(namespace)
            return self.endpoints(namespace)

        skip_namespaces = list()
        if namespace == ALL_NAMESPACES:
            # pods of individually active namespaces are already forwarded
            skip_namespaces = [ns for ns in self._active if ns != ALL_NAMESPACES]

        discoverer = self.discoverer_factory(cluster.core_api)
        pairs = discoverer.discover(namespace, skip_namespaces=skip_namespaces)
        endpoints = self.orchestrator.build(namespace, pairs, cluster)
        for endpoint in endpoints:
            self._endpoints.setdefault(endpoint.namespace, list()).append(endpoint)
        self._active.append(namespace)

        logger.info(f"Got {len(endpoints)} websites forwarded in namespace {namespace}")
        return self.endpoints(namespace)

    def deactivate(self, namespace):
        """Stops forwarding the websites of the namespace

        For ALL_NAMESPACES only the websites which are not in another active namespace are stopped.
        """
        if namespace in self._active:
            self._active.remove(namespace)

        if namespace == ALL_NAMESPACES:
            removed = [ns for ns in self._endpoints if ns not in self._active]
        else:
            removed = [namespace] if namespace in self._endpoints else list()

        for ns in removed:
            for endpoint in self._endpoints.pop(ns):
                self._close(endpoint)
        logger.debug(f"Active namespaces are now {self._active}")

    def shutdown_all(self):
        for endpoint in self.endpoints():
            self._close(endpoint)
        self._endpoints.clear()
        self._active.clear()

    def _close(self, endpoint):
        logger.info(f"Closing port forward on port {endpoint.pod_port} of pod {endpoint.pod_name}")
        endpoint.stop()
        if endpoint.icon is not None:
            self.orchestrator.icon_resolver.discard(endpoint.icon)
