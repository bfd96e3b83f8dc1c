#!/usr/bin/env python3

import logging
import threading

from kube_porthole.conf import Config, set_config
from kube_porthole.conf.parser import parse_args
from kube_porthole.conf.logging import setup_logger
from kube_porthole.core.client import Client
from kube_porthole.core.session import SessionState
from kube_porthole.core.types import ALL_NAMESPACES
from kube_porthole.modules.discovery.icons import IconResolver
from kube_porthole.modules.forwarding.orchestrator import ForwardOrchestrator
from kube_porthole.modules.report import get_reporter, get_dispatcher
from kube_porthole.plugins import initialize_plugin_manager

logger = logging.getLogger(__name__)


def to_namespace(name):
    return ALL_NAMESPACES if name.lower() in ("all", ALL_NAMESPACES.lower()) else name


def build_config(args):
    return Config(
        kubeconfig=args.kubeconfig,
        context=args.context,
        namespaces=[to_namespace(ns) for ns in args.namespaces],
        ready_timeout=args.ready_timeout,
        network_timeout=args.network_timeout,
        drop_on_icon_failure=not args.keep_icon_failures,
        icon_dir=args.icon_dir,
        log_file=args.log_file,
        report=args.report,
        dispatch=args.dispatch,
        keep_open=args.keep_open,
    )


def build_client(config):
    orchestrator = ForwardOrchestrator(icon_resolver=IconResolver(icon_dir=config.icon_dir))
    return Client(session_state=SessionState(orchestrator=orchestrator))


def list_contexts(client):
    print("\nContexts:\n---------")
    for context in client.get_available_contexts():
        marker = "*" if context == client.get_current_context() else " "
        print(f"{marker} {context}")


def list_namespaces(client):
    print("\nNamespaces:\n-----------")
    for namespace in client.list_namespaces():
        print(f"* {namespace}")


def forward_namespaces(client, config):
    reporter = get_reporter(config.report)
    dispatcher = get_dispatcher(config.dispatch)

    for namespace in config.namespaces:
        client.get_endpoints(namespace)

    session_state = client.session_state
    report = reporter.get_report(
        endpoints=session_state.endpoints(),
        context=client.get_current_context(),
        namespaces=session_state.active_namespaces,
    )
    dispatcher.dispatch(report)


def wait_until_interrupted():
    logger.info("Keeping port forwards open, press Ctrl+C to stop")
    stopped = threading.Event()
    while not stopped.wait(1):
        pass


def main(argv=None):
    pm = initialize_plugin_manager()
    # Using a plugin hook for adding arguments before parsing
    args = parse_args(add_args_hook=pm.hook.parser_add_arguments, argv=argv)
    config = build_config(args)
    setup_logger(args.log, args.log_file)
    set_config(config)

    # Running all other registered plugins before execution
    pm.hook.load_plugin(args=args)

    client = build_client(config)
    try:
        if not client.initialize(config.kubeconfig, config.context):
            return 1

        if args.list_contexts:
            list_contexts(client)
            return 0
        if args.list_namespaces:
            list_namespaces(client)
            return 0

        if not config.namespaces:
            logger.warning("No namespace given, use --namespace NAMESPACE or --namespace all")
            return 1

        forward_namespaces(client, config)
        if config.keep_open:
            wait_until_interrupted()
    except KeyboardInterrupt:
        logger.debug("Kube-Porthole stopped by user")
    finally:
        client.shutdown_all()
        logger.debug("Closed all port forwards")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
