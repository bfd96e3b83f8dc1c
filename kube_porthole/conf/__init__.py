from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Config:
    """Config is a configuration container.
    It contains the following fields:
    - kubeconfig: Path to the kubeconfig file (defaults to $KUBECONFIG or ~/.kube/config)
    - context: Kubeconfig context to use (defaults to the file's current-context)
    - namespaces: Namespaces to forward, "All Namespaces" forwards every namespace
    - ready_timeout: Seconds to wait for a tunnel to become ready
    - network_timeout: Timeout for icon and title HTTP requests
    - drop_on_icon_failure: Drop an endpoint when no icon could be downloaded for it
    - icon_dir: Directory to store downloaded icons in (a temporary directory by default)
    - log_file: Log File path
    - report: Output format
    - dispatch: Where to send the report to
    - keep_open: Keep tunnels open until interrupted
    """

    kubeconfig: Optional[str] = None
    context: Optional[str] = None
    namespaces: List[str] = field(default_factory=list)
    ready_timeout: float = 5.0
    network_timeout: float = 3.0
    drop_on_icon_failure: bool = True
    icon_dir: Optional[str] = None
    log_file: Optional[str] = None
    report: str = "plain"
    dispatch: str = "stdout"
    keep_open: bool = False


_config: Optional[Config] = None


def get_config() -> Config:
    if not _config:
        raise ValueError("Configuration is not initialized")
    return _config


def set_config(new_config: Config) -> None:
    global _config
    _config = new_config
