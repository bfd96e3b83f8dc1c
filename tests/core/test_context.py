from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from kube_porthole.core.context import ClusterContextManager
from kube_porthole.core.errors import ConfigError

CONTEXTS = (["dev", "prod"], "dev")


def fake_build(config_path, context):
    return SimpleNamespace(config_path=config_path, name=context, api_client=MagicMock(), core_api=MagicMock())


@pytest.fixture
def manager():
    return ClusterContextManager(MagicMock())


@pytest.fixture
def kubeconfig():
    with patch("kube_porthole.core.context.list_contexts", return_value=CONTEXTS) as list_contexts, patch(
        "kube_porthole.core.context.build_cluster_context", side_effect=fake_build
    ) as build:
        yield SimpleNamespace(list_contexts=list_contexts, build=build)


def test_initialize_uses_default_kubeconfig(manager, kubeconfig):
    with patch("kube_porthole.core.context.default_kubeconfig_path", return_value="/home/user/.kube/config"):
        assert manager.initialize()

    assert manager.current_config_path == "/home/user/.kube/config"
    assert manager.current_context == "dev"
    assert manager.available_contexts() == ["dev", "prod"]
    manager.session_state.shutdown_all.assert_called_once()


def test_initialize_failure_leaves_manager_empty(manager, kubeconfig):
    kubeconfig.list_contexts.side_effect = ConfigError("no such file")
    assert not manager.initialize("/missing")
    assert manager.cluster is None
    assert manager.current_config_path == ""
    assert manager.current_context == ""
    assert manager.available_contexts() == []


def test_switch_context(manager, kubeconfig):
    manager.initialize("/kubeconfig")
    manager.session_state.reset_mock()

    assert manager.switch("/kubeconfig", "prod") == ("/kubeconfig", "prod")
    assert manager.current_context == "prod"
    manager.session_state.shutdown_all.assert_called_once()


def test_switch_to_current_context_is_noop(manager, kubeconfig):
    manager.initialize("/kubeconfig", "dev")
    manager.session_state.reset_mock()
    kubeconfig.build.reset_mock()

    assert manager.switch("/kubeconfig", "dev") == ("/kubeconfig", "dev")
    # an empty context selects the current-context, which is already installed
    assert manager.switch("/kubeconfig", "") == ("/kubeconfig", "dev")
    kubeconfig.build.assert_not_called()
    manager.session_state.shutdown_all.assert_not_called()


def test_switch_to_unknown_context_uses_current_context(manager, kubeconfig):
    manager.initialize("/kubeconfig", "prod")
    assert manager.switch("/other", "staging") == ("/other", "dev")
    kubeconfig.build.assert_called_with("/other", "dev")


def test_switch_failure_keeps_previous_context(manager, kubeconfig):
    manager.initialize("/kubeconfig", "dev")
    previous_cluster = manager.cluster
    manager.session_state.reset_mock()
    kubeconfig.build.side_effect = ConfigError("bad credentials")

    assert manager.switch("/kubeconfig", "prod") == ("/kubeconfig", "dev")
    assert manager.cluster is previous_cluster
    manager.session_state.shutdown_all.assert_not_called()
