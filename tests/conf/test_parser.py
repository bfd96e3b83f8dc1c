from kube_porthole.conf.parser import parse_args
from kube_porthole.plugins import initialize_plugin_manager


def parse(*argv):
    pm = initialize_plugin_manager()
    return parse_args(add_args_hook=pm.hook.parser_add_arguments, argv=list(argv))


def test_defaults():
    args = parse()
    assert args.kubeconfig is None
    assert args.context is None
    assert args.namespaces == []
    assert args.ready_timeout == 5.0
    assert args.network_timeout == 3.0
    assert not args.keep_icon_failures
    assert not args.keep_open
    assert args.report == "plain"
    assert args.dispatch == "stdout"


def test_namespaces_are_repeatable():
    args = parse("-n", "default", "--namespace", " monitoring ", "-n", " ")
    assert args.namespaces == ["default", "monitoring"]


def test_timeouts_and_flags():
    args = parse("--ready-timeout", "2", "--network-timeout", "0.5", "--keep-icon-failures", "--icon-dir", "/tmp/x")
    assert args.ready_timeout == 2.0
    assert args.network_timeout == 0.5
    assert args.keep_icon_failures
    assert args.icon_dir == "/tmp/x"
