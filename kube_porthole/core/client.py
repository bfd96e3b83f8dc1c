import json
import logging
import threading

from kube_porthole.core.context import ClusterContextManager
from kube_porthole.core.errors import ClusterQueryError
from kube_porthole.core.session import SessionState
from kube_porthole.modules.discovery.endpoints import EndpointDiscoverer
from kube_porthole.modules.forwarding.orchestrator import ForwardOrchestrator

logger = logging.getLogger(__name__)


class Client:
    """Client
    Entry point of the presentation layer, every result is a plain value ready to be serialized
    """

    def __init__(self, session_state=None, context_manager=None, discoverer_factory=EndpointDiscoverer):
        self.session_state = session_state or SessionState(discoverer_factory=discoverer_factory)
        self.context_manager = context_manager or ClusterContextManager(self.session_state)
        self.discoverer_factory = discoverer_factory
        # at most one mutation of the session state in flight
        self._lock = threading.RLock()

    @property
    def cluster(self):
        return self.context_manager.cluster

    @property
    def icon_resolver(self):
        orchestrator = self.session_state.orchestrator
        return orchestrator.icon_resolver if isinstance(orchestrator, ForwardOrchestrator) else None

    def initialize(self, config_path=None, context=None):
        with self._lock:
            return self.context_manager.initialize(config_path, context)

    def list_namespaces(self):
        if not self.cluster:
            logger.warning("No cluster context installed, cannot list namespaces")
            return list()
        try:
            return self.discoverer_factory(self.cluster.core_api).list_namespaces()
        except ClusterQueryError as ex:
            logger.warning("Found no namespaces")
            logger.debug(f"{ex}")
            return list()

    def get_endpoints(self, namespace):
        """Forwards the websites of the namespace, returns the JSON array of its endpoints"""
        with self._lock:
            if not self.cluster:
                logger.warning(f"No cluster context installed, cannot get websites in namespace {namespace}")
                return "[]"
            try:
                endpoints = self.session_state.activate(namespace, self.cluster)
            except ClusterQueryError as ex:
                logger.warning(f"Failed getting websites in namespace {namespace}: {ex}")
                return "[]"
            return json.dumps([endpoint.to_dict() for endpoint in endpoints])

    def remove_namespace(self, namespace):
        with self._lock:
            self.session_state.deactivate(namespace)

    def switch_context(self, config_path, context):
        with self._lock:
            return list(self.context_manager.switch(config_path, context))

    def get_current_config_path(self):
        return self.context_manager.current_config_path

    def get_available_contexts(self):
        return self.context_manager.available_contexts()

    def get_current_context(self):
        return self.context_manager.current_context

    def shutdown_all(self):
        with self._lock:
            logger.info("Closing all port forwards")
            self.session_state.shutdown_all()
            if self.icon_resolver:
                self.icon_resolver.cleanup()
