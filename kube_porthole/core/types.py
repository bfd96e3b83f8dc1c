from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

ALL_NAMESPACES = "All Namespaces"


class ResourceKind(Enum):
    SERVICE = "service"
    CONTAINER = "container"


@dataclass(frozen=True)
class ForwardablePair:
    """A pod and one of its target ports, eligible for port-forwarding"""

    namespace: str
    pod_name: str
    port: int
    kind: ResourceKind
    resource_name: str

    def location(self):
        return f"{self.namespace}/{self.pod_name}:{self.port}"


@dataclass
class ClusterContext:
    """A kubeconfig context together with the API clients built for it"""

    config_path: str
    name: str
    api_client: Any = field(repr=False)
    core_api: Any = field(repr=False)


@dataclass(frozen=True)
class Icon:
    remote_url: str
    file_path: str
    size: int
    mime_type: str
    width: int = 0
    height: int = 0

    @property
    def file_url(self):
        return f"file://{self.file_path}"


@dataclass
class Endpoint:
    """A forwarded website. Only the fields returned by to_dict are handed to the presentation layer"""

    local_port: int
    pod_port: int
    title: str
    icon_url: str
    icon_remote_url: str
    namespace: str
    pod_name: str
    pair: Optional[ForwardablePair] = field(default=None, repr=False, compare=False)
    session: Any = field(default=None, repr=False, compare=False)
    icon: Optional[Icon] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_forward(cls, pair, session, icon, title):
        return cls(
            local_port=session.local_port,
            pod_port=pair.port,
            title=title or pair.pod_name,
            icon_url=icon.file_url if icon else "",
            icon_remote_url=icon.remote_url if icon else "",
            namespace=pair.namespace,
            pod_name=pair.pod_name,
            pair=pair,
            session=session,
            icon=icon,
        )

    @property
    def kind(self):
        return self.pair.kind if self.pair else None

    @property
    def url(self):
        return f"http://localhost:{self.local_port}"

    @property
    def is_live(self):
        return self.session is not None and not self.session.is_stopped

    def stop(self):
        if self.session is not None:
            self.session.stop()

    def to_dict(self):
        return {
            "localPort": self.local_port,
            "podPort": self.pod_port,
            "title": self.title,
            "iconUrl": self.icon_url,
            "iconRemoteUrl": self.icon_remote_url,
            "namespace": self.namespace,
            "podName": self.pod_name,
        }
