import logging

from kube_porthole.conf.k8s import build_cluster_context, default_kubeconfig_path, list_contexts
from kube_porthole.core.errors import ConfigError

logger = logging.getLogger(__name__)


class ClusterContextManager:
    """Holds the active cluster context and replaces it on request

    A new context is only installed once its client was built, the forwards of the previous one are closed right
    before that. Any failure keeps the previous context and its forwards untouched.
    """

    def __init__(self, session_state):
        self.session_state = session_state
        self.cluster = None
        self._contexts = list()

    @property
    def current_config_path(self):
        return self.cluster.config_path if self.cluster else ""

    @property
    def current_context(self):
        return self.cluster.name if self.cluster else ""

    def available_contexts(self):
        return list(self._contexts)

    def initialize(self, config_path=None, context=None):
        """Installs the given or default kubeconfig, returns whether a context could be installed"""
        config_path = config_path or default_kubeconfig_path()
        self.switch(config_path, context)
        if not self.cluster:
            logger.warning(f"Failed to get a client from the kubeconfig at {config_path}")
        return self.cluster is not None

    def switch(self, config_path, context=None):
        """returns tuple of (config path, context) now in use, unchanged when switching failed"""
        previous = (self.current_config_path, self.current_context)
        if self.cluster and (config_path, context) == previous:
            # nothing changed
            return previous

        try:
            contexts, default_context = list_contexts(config_path)
            use_context = context if context in contexts else default_context
            if context and context != use_context:
                logger.warning(f"Context {context} not found in {config_path}, using {use_context}")
            if self.cluster and (config_path, use_context) == previous:
                return previous
            cluster = build_cluster_context(config_path, use_context)
        except ConfigError as ex:
            logger.info(f"Error switching to context {context} of {config_path}")
            logger.debug(f"{ex}", exc_info=True)
            return previous

        # close forwards in the old context
        self.session_state.shutdown_all()
        self.cluster = cluster
        self._contexts = contexts
        logger.info(f"Switched to context {use_context} of {config_path}")
        return config_path, use_context
