from kube_porthole.modules.report.factory import get_reporter, get_dispatcher

__all__ = [get_reporter, get_dispatcher]
