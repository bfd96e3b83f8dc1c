import logging
import os

import kubernetes

from kube_porthole.core.errors import ConfigError
from kube_porthole.core.types import ClusterContext

logger = logging.getLogger(__name__)


def default_kubeconfig_path():
    kubeconfig = os.environ.get("KUBECONFIG")
    if kubeconfig:
        # only the first file of a KUBECONFIG list is used
        return kubeconfig.split(os.pathsep)[0]
    return os.path.join(os.path.expanduser("~"), ".kube", "config")


def list_contexts(config_path):
    """returns tuple of (context names, current context name)"""
    logger.debug(f"Reading contexts of kubeconfig {config_path}")
    try:
        contexts, active = kubernetes.config.list_kube_config_contexts(config_file=config_path)
    except Exception as ex:
        raise ConfigError(f"Failed to load kubeconfig {config_path}: {ex}", ex) from ex
    return [context["name"] for context in contexts], active["name"] if active else None


def build_cluster_context(config_path, context):
    logger.debug(f"Building a Kubernetes client for context {context} of {config_path}")
    try:
        api_client = kubernetes.config.new_client_from_config(
            config_file=config_path, context=context, persist_config=False
        )
    except Exception as ex:
        raise ConfigError(f"Failed to build a client for context {context} of {config_path}: {ex}", ex) from ex
    return ClusterContext(
        config_path=config_path,
        name=context,
        api_client=api_client,
        core_api=kubernetes.client.CoreV1Api(api_client),
    )
