from prettytable import ALL, PrettyTable

from kube_porthole.modules.report.base import BaseReporter

MAX_TABLE_WIDTH = 40


class PlainReporter(BaseReporter):
    def get_report(self, *, endpoints, context="", namespaces=(), **kwargs):
        """generates report tables"""
        output = f"\nContext: {context or 'none'}\nNamespaces: {', '.join(namespaces) or 'none'}\n"
        if endpoints:
            output += self.endpoints_table(endpoints)
        else:
            output += "\nKube Porthole couldn't find any websites"
        return output

    def endpoints_table(self, endpoints):
        column_names = ["Title", "URL", "Namespace", "Pod", "Pod Port"]
        endpoints_table = PrettyTable(column_names, hrules=ALL)
        endpoints_table.align = "l"
        endpoints_table.max_width = MAX_TABLE_WIDTH
        endpoints_table.padding_width = 1
        endpoints_table.header_style = "upper"

        for row in self.get_endpoints(endpoints):
            endpoints_table.add_row([row["title"], row["url"], row["namespace"], row["pod"], row["pod_port"]])
        return f"\nForwarded Websites\n{endpoints_table}\n"
