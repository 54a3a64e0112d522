"""Standard vSwitch port groups across cluster hosts, through VMware PowerCLI."""

from dataclasses import dataclass

from .powershell import PowerShellError, invoke, invoke_csv, ps_quote


@dataclass
class HostOutcome:
    host: str
    status: str
    error: str = ""

    def as_row(self):
        return {"Host": self.host, "Status": self.status, "Error": self.error}


class VCenter:
    """One vCenter server.

    Every script opens its own session with ``Connect-VIServer`` and relies on
    the PowerCLI credential store for authentication.
    """

    def __init__(self, server, runner=None):
        self.server = server
        self.runner = runner

    def _script(self, body):
        return (
            "Import-Module VMware.VimAutomation.Core -ErrorAction Stop\n"
            f"Connect-VIServer -Server {ps_quote(self.server)} -ErrorAction Stop | Out-Null\n"
            f"{body}"
        )

    def _run(self, body):
        return invoke(self._script(body), self.runner).strip()

    def cluster_hosts(self, cluster):
        rows = invoke_csv(self._script(
            f"Get-Cluster -Name {ps_quote(cluster)} | Get-VMHost | "
            "Select-Object Name | ConvertTo-Csv -NoTypeInformation"
        ), self.runner)
        return sorted(row["Name"] for row in rows)

    def vm_names(self):
        rows = invoke_csv(self._script(
            "Get-VM | Select-Object Name | ConvertTo-Csv -NoTypeInformation"
        ), self.runner)
        return [row["Name"] for row in rows]

    def add_port_group(self, host, vswitch, name, vlan_id=0):
        return self._run(f'''
        $vmhost = Get-VMHost -Name {ps_quote(host)}
        if (Get-VirtualPortGroup -VMHost $vmhost -Name {ps_quote(name)} -Standard -ErrorAction SilentlyContinue) {{
            "exists"
        }} else {{
            Get-VirtualSwitch -VMHost $vmhost -Name {ps_quote(vswitch)} -Standard |
            New-VirtualPortGroup -Name {ps_quote(name)} -VLanId {int(vlan_id)} | Out-Null
            "created"
        }}
        ''')

    def remove_port_group(self, host, name):
        return self._run(f'''
        $vmhost = Get-VMHost -Name {ps_quote(host)}
        $pg = Get-VirtualPortGroup -VMHost $vmhost -Name {ps_quote(name)} -Standard -ErrorAction SilentlyContinue
        if ($pg) {{
            Remove-VirtualPortGroup -VirtualPortGroup $pg -Confirm:$false
            "removed"
        }} else {{
            "absent"
        }}
        ''')

    def add_port_group_to_cluster(self, cluster, vswitch, name, vlan_id=0, progress=None):
        return self._for_each_host(
            cluster, lambda host: self.add_port_group(host, vswitch, name, vlan_id), progress
        )

    def remove_port_group_from_cluster(self, cluster, name, progress=None):
        return self._for_each_host(
            cluster, lambda host: self.remove_port_group(host, name), progress
        )

    def _for_each_host(self, cluster, action, progress):
        hosts = self.cluster_hosts(cluster)
        outcomes = []
        for i, host in enumerate(hosts, start=1):
            try:
                outcomes.append(HostOutcome(host, action(host)))
            except PowerShellError as e:
                outcomes.append(HostOutcome(host, "failed", str(e)))
            if progress is not None:
                progress(i, len(hosts), host)
        return outcomes
