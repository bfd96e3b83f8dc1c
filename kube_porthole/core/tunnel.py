import logging
import select
import socket
import threading

from kubernetes.stream import portforward

from kube_porthole.conf import get_config
from kube_porthole.core.errors import TunnelError, TunnelTimeoutError

logger = logging.getLogger(__name__)

LOCAL_HOST = "127.0.0.1"
POLL_INTERVAL = 0.5
RELAY_BUFFER_SIZE = 64 * 1024


def pod_port_connector(core_api, namespace, pod_name, port):
    """Returns a callable which upgrades a new request to the pod's portforward endpoint
    and returns a socket-like object connected to the given pod port"""

    def connect():
        forward = portforward(
            core_api.connect_get_namespaced_pod_portforward,
            pod_name,
            namespace,
            ports=str(port),
        )
        remote = forward.socket(port)
        remote.setblocking(True)
        return remote

    return connect


class TunnelSession:
    """Forwards a local port to a port of a pod

    The local port is leased from the OS when the session starts and released once it stops.
    Every connection accepted on the local port is relayed through its own port-forward stream.
    """

    def __init__(self, pair, connect):
        self.pair = pair
        self.remote_port = pair.port
        self.local_port = None
        self.error = None
        self._connect = connect
        self._listener = None
        self._thread = None
        self._connections = set()
        self._lock = threading.Lock()
        # ready is set once the tunnel can carry traffic, settled once it is ready or failed
        self._ready = threading.Event()
        self._settled = threading.Event()
        self._stop = threading.Event()

    @property
    def is_stopped(self):
        return self._stop.is_set()

    def start(self):
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind((LOCAL_HOST, 0))
        listener.listen()
        listener.settimeout(POLL_INTERVAL)
        self._listener = listener
        self.local_port = listener.getsockname()[1]
        self._thread = threading.Thread(
            target=self._serve,
            name=f"tunnel {self.pair.location()} -> {self.local_port}",
            daemon=True,
        )
        self._thread.start()
        return self

    def wait_ready(self, timeout):
        self._settled.wait(timeout)
        return self._ready.is_set() and not self._stop.is_set()

    def stop(self):
        with self._lock:
            if self._stop.is_set():
                return
            self._stop.set()
            connections = list(self._connections)
            self._connections.clear()
        self._settled.set()

        if self._listener is not None:
            self._close(self._listener)
        for connection in connections:
            self._close(connection)
        logger.debug(f"Stopped port-forward of {self.pair.location()} on local port {self.local_port}")

    def _serve(self):
        try:
            probe = self._connect()
        except Exception as ex:
            self.error = ex
            logger.debug(f"Failed upgrading port-forward request for {self.pair.location()}", exc_info=True)
            self._settled.set()
            return
        self._close(probe)
        if self._stop.is_set():
            return

        self._ready.set()
        self._settled.set()
        logger.debug(f"Port-forward of {self.pair.location()} ready on local port {self.local_port}")

        while not self._stop.is_set():
            try:
                local, _ = self._listener.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            local.setblocking(True)
            threading.Thread(target=self._relay, args=(local,), daemon=True).start()

    def _relay(self, local):
        try:
            remote = self._connect()
        except Exception:
            logger.warning(f"Port-forward stream to {self.pair.location()} could not be opened", exc_info=True)
            self._close(local)
            return

        with self._lock:
            if self._stop.is_set():
                self._close(local)
                self._close(remote)
                return
            self._connections.update((local, remote))

        try:
            sockets = [local, remote]
            while not self._stop.is_set():
                readable, _, _ = select.select(sockets, [], [], POLL_INTERVAL)
                for sock in readable:
                    data = sock.recv(RELAY_BUFFER_SIZE)
                    if not data:
                        return
                    target = remote if sock is local else local
                    target.sendall(data)
        except (OSError, ValueError):
            if not self._stop.is_set():
                logger.info(f"Port-forward stream to {self.pair.location()} was closed", exc_info=True)
        finally:
            with self._lock:
                self._connections.discard(local)
                self._connections.discard(remote)
            self._close(local)
            self._close(remote)

    @staticmethod
    def _close(sock):
        try:
            sock.close()
        except OSError:
            logger.debug("Failed closing socket", exc_info=True)


def open_tunnel(pair, cluster, timeout=None, connector=pod_port_connector):
    """Opens a port-forward for the pair and blocks until it is ready

    @raise TunnelTimeoutError: the tunnel did not become ready in time, it is stopped before raising
    @raise TunnelError: the port-forward request failed before the tunnel became ready
    """
    if timeout is None:
        timeout = get_config().ready_timeout
    session = TunnelSession(pair, connector(cluster.core_api, pair.namespace, pair.pod_name, pair.port))
    session.start()
    if session.wait_ready(timeout):
        return session

    session.stop()
    if session.error is not None:
        raise TunnelError(
            pair.pod_name, pair.port, f"failed to port-forward pod {pair.pod_name} on port {pair.port}: {session.error}"
        ) from session.error
    raise TunnelTimeoutError(pair.pod_name, pair.port, timeout)
