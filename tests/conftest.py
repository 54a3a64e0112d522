import subprocess
from datetime import datetime, timedelta, timezone

import pytest

from adcleaner.directory import AccountState, parent_dn
from adcleaner.models import ComputerRecord, RecoveryRecord
from adcleaner.powershell import PowerShellError

NOW = datetime(2026, 10, 1, 12, 0, 0, tzinfo=timezone.utc)


def days_ago(days):
    return NOW - timedelta(days=days)


def make_computer(name, *, ou="OU=Workstations,DC=corp,DC=example,DC=com", changed=200, password=200,
                  expiration=None, operating_system="Windows 11 Enterprise", enabled=True):
    return ComputerRecord(
        name=name,
        sam_account_name=name + "$",
        distinguished_name=f"CN={name},{ou}",
        operating_system=operating_system,
        enabled=enabled,
        when_created=days_ago(900),
        when_changed=days_ago(changed) if changed is not None else None,
        password_last_set=days_ago(password) if password is not None else None,
        recovery_expiration=days_ago(expiration) if expiration is not None else None,
        last_logon=days_ago(300),
    )


class FakeRunner:
    """Stands in for ``run_powershell_command``; answers are matched by substring."""

    def __init__(self, responses=None):
        self.responses = list((responses or {}).items())
        self.commands = []

    def add(self, needle, stdout="", returncode=0, stderr=""):
        self.responses.append((needle, (stdout, returncode, stderr)))

    def __call__(self, ps_command):
        self.commands.append(ps_command)
        for needle, response in self.responses:
            if needle in ps_command:
                if isinstance(response, str):
                    response = (response, 0, "")
                stdout, returncode, stderr = response
                return subprocess.CompletedProcess(["powershell"], returncode, stdout, stderr)
        return subprocess.CompletedProcess(["powershell"], 0, "", "")


class FakeDirectory:
    """In-memory directory keyed by account name."""

    def __init__(self, computers=(), recovery_records=(), containers=()):
        self.computers = list(computers)
        self.recovery_records = list(recovery_records)
        self.containers = set(c.lower() for c in containers)
        self.accounts = {
            c.sam_account_name.lower(): AccountState(c.distinguished_name, c.enabled) for c in computers
        }
        self.recovery_queries = 0
        self.created = []
        self.disabled = []
        self.moved = []
        self.fail_on = {}

    def query_computers(self):
        return list(self.computers)

    def query_recovery_records(self):
        self.recovery_queries += 1
        return list(self.recovery_records)

    def container_exists(self, dn):
        return dn.lower() in self.containers

    def create_container(self, parent, name):
        dn = f"OU={name},{parent}"
        self.containers.add(dn.lower())
        self.created.append(dn)
        return dn

    def get_computer_state(self, sam_account_name):
        key = sam_account_name.lower()
        if key not in self.accounts:
            raise PowerShellError("Get-ADComputer", f"Cannot find an object with identity: '{sam_account_name}'")
        return self.accounts[key]

    def _find(self, dn):
        for key, state in self.accounts.items():
            if state.distinguished_name.lower() == dn.lower():
                return key, state
        raise PowerShellError("Get-ADObject", f"Cannot find {dn}")

    def disable_account(self, dn):
        if self.fail_on.get(dn) == "disable":
            raise PowerShellError("Disable-ADAccount", "Access is denied")
        key, state = self._find(dn)
        self.accounts[key] = state._replace(enabled=False)
        self.disabled.append(dn)

    def move_object(self, dn, target):
        if self.fail_on.get(dn) == "move":
            raise PowerShellError("Move-ADObject", "Access is denied")
        key, state = self._find(dn)
        rdn = dn[: len(dn) - len(parent_dn(dn)) - 1]
        self.accounts[key] = state._replace(distinguished_name=f"{rdn},{target}")
        self.moved.append((dn, target))


@pytest.fixture
def recovery_for_ws01():
    return RecoveryRecord(
        distinguished_name="CN=2025-01-01T10:00:00-00:00{0A1B2C3D-0000-0000-0000-000000000001},"
                           "CN=WS01,OU=Workstations,DC=corp,DC=example,DC=com",
        recovery_password="111111-222222-333333-444444-555555-666666-777777-888888",
        when_created=days_ago(640),
    )
