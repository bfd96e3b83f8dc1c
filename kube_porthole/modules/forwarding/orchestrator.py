import logging
import queue

from threading import Thread

from kube_porthole.conf import get_config
from kube_porthole.core.errors import IconResolutionError, TunnelError
from kube_porthole.core.tunnel import open_tunnel
from kube_porthole.core.types import Endpoint
from kube_porthole.modules.discovery.icons import IconResolver

logger = logging.getLogger(__name__)


class ForwardOrchestrator:
    """Forward Orchestrator
    Forwards every pair on its own thread, then resolves the icon and title of the website behind it
    """

    def __init__(self, icon_resolver=None, tunnel_opener=open_tunnel, drop_on_icon_failure=None):
        self.icon_resolver = icon_resolver or IconResolver()
        self.tunnel_opener = tunnel_opener
        self.drop_on_icon_failure = drop_on_icon_failure

    def should_drop_on_icon_failure(self):
        if self.drop_on_icon_failure is not None:
            return self.drop_on_icon_failure
        return get_config().drop_on_icon_failure

    def build(self, namespace, pairs, cluster):
        """Forwards all pairs concurrently and returns the endpoints of the ones that succeeded, in no particular order"""
        results = queue.Queue()
        workers = [
            Thread(target=self._worker, args=(pair, cluster, results), name=f"forward {pair.location()}", daemon=True)
            for pair in pairs
        ]
        for worker in workers:
            worker.start()

        logger.info(f"Waiting for {len(workers)} potential websites in namespace {namespace} to be processed")
        for worker in workers:
            worker.join()

        endpoints = list()
        while not results.empty():
            endpoint = results.get_nowait()
            if endpoint:
                endpoints.append(endpoint)
        logger.info(f"{len(endpoints)} of {len(workers)} websites forwarded in namespace {namespace}")
        return endpoints

    def _worker(self, pair, cluster, results):
        endpoint = None
        try:
            endpoint = self.forward(pair, cluster)
        except Exception:
            logger.warning(f"Unexpected failure forwarding {pair.location()}", exc_info=True)
        finally:
            results.put(endpoint)

    def forward(self, pair, cluster):
        """Returns the endpoint of the pair, or None when it has to be dropped"""
        try:
            session = self.tunnel_opener(pair, cluster)
        except TunnelError as ex:
            logger.warning(f"Failed to forward pod {pair.pod_name} in {pair.kind.value} {pair.resource_name}: {ex}")
            return None

        try:
            icon, title = self.icon_resolver.resolve(f"http://localhost:{session.local_port}")
        except IconResolutionError as ex:
            if self.should_drop_on_icon_failure():
                logger.warning(
                    f"Failed to get icons for pod {pair.pod_name} in {pair.kind.value} {pair.resource_name} "
                    f"on port {pair.port}: {ex}"
                )
                session.stop()
                return None
            logger.info(f"Keeping {pair.location()} without an icon: {ex}")
            icon, title = None, ""
        except Exception:
            session.stop()
            raise

        endpoint = Endpoint.from_forward(pair, session, icon, title)
        logger.info(f"Forwarded {pair.location()} ({endpoint.title}) to local port {endpoint.local_port}")
        return endpoint
