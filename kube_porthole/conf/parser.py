from argparse import ArgumentParser
from kube_porthole.plugins import hookimpl


@hookimpl
def parser_add_arguments(parser):
    """
    This is the default hook implementation for parse_add_argument
    Contains initialization for all default arguments
    """
    parser.add_argument(
        "--kubeconfig",
        type=str,
        metavar="KUBECONFIG",
        default=None,
        help="Path to the kubeconfig file to use. Defaults to $KUBECONFIG, then ~/.kube/config",
    )

    parser.add_argument(
        "--context",
        type=str,
        default=None,
        help="Kubeconfig context to use. Defaults to the current-context of the kubeconfig file",
    )

    parser.add_argument(
        "-n",
        "--namespace",
        dest="namespaces",
        action="append",
        metavar="NAMESPACE",
        default=list(),
        help="Namespace to discover and forward, may be given multiple times. "
        "Use 'all' to forward every namespace in the cluster",
    )

    parser.add_argument("--list-namespaces", action="store_true", help="Print the namespaces of the cluster and exit")

    parser.add_argument("--list-contexts", action="store_true", help="Print the contexts of the kubeconfig and exit")

    parser.add_argument(
        "--ready-timeout",
        type=float,
        default=5.0,
        help="Seconds to wait for each port-forward to become ready before dropping it",
    )

    parser.add_argument("--network-timeout", type=float, default=3.0, help="Icon and title requests timeout")

    parser.add_argument(
        "--keep-icon-failures",
        action="store_true",
        help="Keep endpoints whose icon could not be downloaded, instead of closing their tunnel",
    )

    parser.add_argument(
        "--icon-dir",
        type=str,
        default=None,
        help="Directory to store downloaded icons in. A temporary directory is used by default",
    )

    parser.add_argument(
        "--keep-open",
        action="store_true",
        help="Keep all tunnels open after reporting, until interrupted with Ctrl+C",
    )

    parser.add_argument(
        "--log",
        type=str,
        metavar="LOGLEVEL",
        default="INFO",
        help="Set log level, options are: debug, info, warn, none",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Path to a log file to output all logs to",
    )

    parser.add_argument(
        "--report",
        type=str,
        default="plain",
        help="Set report type, options are: plain, yaml, json",
    )

    parser.add_argument(
        "--dispatch",
        type=str,
        default="stdout",
        help="Where to send the report to, options are: "
        "stdout, http (set KUBE_PORTHOLE_HTTP_DISPATCH_URL and "
        "KUBE_PORTHOLE_HTTP_DISPATCH_METHOD environment variables to configure)",
    )


def parse_args(add_args_hook, argv=None):
    """
    Function handles all argument parsing

    @param add_arguments: hook for adding arguments to it's given ArgumentParser parameter
    @param argv: arguments to parse, sys.argv is used when None
    @return: parsed arguments dict
    """
    parser = ArgumentParser(description="kube-porthole - forward every web endpoint of a Kubernetes namespace")
    # adding all arguments to the parser
    add_args_hook(parser=parser)

    args = parser.parse_args(argv)
    args.namespaces = [ns.strip() for ns in args.namespaces if ns.strip()]
    return args
