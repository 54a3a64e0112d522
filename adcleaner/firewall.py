"""Check Windows Firewall profiles on remote hosts over PowerShell remoting."""

from dataclasses import dataclass, field

from .powershell import PowerShellError, invoke_csv, parse_bool, ps_quote


@dataclass
class FirewallStatus:
    host: str
    profiles: dict = field(default_factory=dict)
    error: str = ""

    @property
    def compliant(self) -> bool:
        return not self.error and bool(self.profiles) and all(self.profiles.values())

    def as_row(self):
        row = {"Host": self.host, "Compliant": self.compliant}
        for profile in ("Domain", "Private", "Public"):
            row[profile] = self.profiles.get(profile, "")
        row["Error"] = self.error
        return row


def firewall_command(host):
    return f'''
    Invoke-Command -ComputerName {ps_quote(host)} -ErrorAction Stop -ScriptBlock {{
        Get-NetFirewallProfile | Select-Object Name, Enabled
    }} |
    Select-Object Name, Enabled |
    ConvertTo-Csv -NoTypeInformation
    '''


def check_host(host, runner=None) -> FirewallStatus:
    status = FirewallStatus(host=host)
    try:
        rows = invoke_csv(firewall_command(host), runner)
    except PowerShellError as e:
        status.error = str(e)
        return status

    for row in rows:
        status.profiles[row["Name"]] = parse_bool(row["Enabled"])
    if not status.profiles:
        status.error = "No firewall profiles returned"
    return status


def check_firewall(hosts, runner=None, progress=None):
    results = []
    for i, host in enumerate(hosts, start=1):
        results.append(check_host(host, runner))
        if progress is not None:
            progress(i, len(hosts), host)
    return results
