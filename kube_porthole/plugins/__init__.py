import pluggy

from kube_porthole.plugins import hookspecs

hookimpl = pluggy.HookimplMarker("kube-porthole")


def initialize_plugin_manager():
    """
    Initializes and loads all default and setup implementations for registered plugins

    @return: initialized plugin manager
    """
    pm = pluggy.PluginManager("kube-porthole")
    pm.add_hookspecs(hookspecs)
    pm.load_setuptools_entrypoints("kube_porthole")

    # default registration of builtin implemented plugins
    from kube_porthole.conf import parser

    pm.register(parser)

    return pm
