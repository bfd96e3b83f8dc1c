class BaseReporter:
    def get_endpoints(self, endpoints):
        return [
            {
                "title": endpoint.title,
                "url": endpoint.url,
                "namespace": endpoint.namespace,
                "pod": endpoint.pod_name,
                "pod_port": endpoint.pod_port,
                "local_port": endpoint.local_port,
                "icon": endpoint.icon_url,
                "icon_remote_url": endpoint.icon_remote_url,
            }
            for endpoint in sorted(endpoints, key=lambda endpoint: (endpoint.namespace, endpoint.local_port))
        ]

    def get_report(self, *, endpoints, context="", namespaces=(), **kwargs):
        return {
            "context": context,
            "namespaces": list(namespaces),
            "endpoints": self.get_endpoints(endpoints),
        }
