class PortholeError(Exception):
    """Base class of every error raised by kube-porthole"""


class ConfigError(PortholeError):
    """
    This exception is thrown when a kubeconfig cannot be loaded or a client cannot be built for one of its contexts.
    The previously installed context is kept when it happens.
    """

    def __init__(self, message, exc=None):
        super().__init__(message)
        self.wrapped_exc = exc


class ClusterQueryError(PortholeError):
    """
    This exception is thrown when listing pods, services or namespaces fails.
    It aborts the discovery call it happened in, other active namespaces are not affected.
    """

    def __init__(self, message, exc=None):
        super().__init__(message)
        self.wrapped_exc = exc


class TunnelError(PortholeError):
    """This exception is thrown when a port-forward could not be established"""

    def __init__(self, pod_name, remote_port, message=None):
        self.pod_name = pod_name
        self.remote_port = remote_port
        super().__init__(message or f"failed to port-forward pod {pod_name} on port {remote_port}")


class TunnelTimeoutError(TunnelError):
    """This exception is thrown when a port-forward did not become ready in time"""

    def __init__(self, pod_name, remote_port, timeout):
        self.timeout = timeout
        super().__init__(
            pod_name,
            remote_port,
            f"timed out port-forwarding pod {pod_name} on port {remote_port} after {timeout} seconds",
        )


class IconResolutionError(PortholeError):
    """This exception is thrown when no icon could be downloaded for a website"""
