"""Active Directory access through the RSAT ActiveDirectory PowerShell module."""

from collections import namedtuple

from .models import ComputerRecord, RecoveryRecord, UserRecord
from .powershell import (
    invoke,
    invoke_csv,
    ldap_escape,
    parse_bool,
    parse_filetime,
    parse_ps_date,
    ps_date_property,
    ps_quote,
)

AccountState = namedtuple("AccountState", ["distinguished_name", "enabled"])


def parent_dn(dn):
    """Everything after the first unescaped comma of a distinguished name."""
    escaped = False
    for i, char in enumerate(dn):
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ",":
            return dn[i + 1:].strip()
    return ""


class ADDirectory:
    """Queries and mutations against the domain.

    ``runner`` takes a PowerShell script and returns a CompletedProcess; it
    defaults to spawning a hidden ``powershell`` process.
    """

    def __init__(self, runner=None):
        self.runner = runner
        # (row, error) pairs the last computer or user query could not parse
        self.skipped = []

    def _csv(self, ps_command):
        return invoke_csv(ps_command, self.runner)

    def _run(self, ps_command):
        return invoke(ps_command, self.runner).strip()

    def _build(self, rows, build):
        self.skipped = []
        records = []
        for row in rows:
            try:
                records.append(build(row))
            except ValueError as e:
                self.skipped.append((row, e))
        return records

    # -- queries ----------------------------------------------------------

    def query_computers(self):
        computer_ps = f'''
        Get-ADComputer -Filter "Enabled -eq 'True'" -Properties OperatingSystem, whenCreated, whenChanged, PasswordLastSet, LastLogonDate, ms-Mcs-AdmPwdExpirationTime |
        Select-Object Name, SamAccountName, DistinguishedName, OperatingSystem, Enabled,
        {ps_date_property("whenCreated")},
        {ps_date_property("whenChanged")},
        {ps_date_property("PasswordLastSet")},
        {ps_date_property("LastLogonDate")},
        @{{Name="AdmPwdExpirationTime";Expression={{$_."ms-Mcs-AdmPwdExpirationTime"}}}} |
        ConvertTo-Csv -NoTypeInformation
        '''
        return self._build(self._csv(computer_ps), computer_from_row)

    def query_computer_names(self, os_match=""):
        if os_match:
            name_filter = f"Enabled -eq 'True' -and OperatingSystem -like '*{os_match}*'"
        else:
            name_filter = "Enabled -eq 'True'"
        ps = f'''
        Get-ADComputer -Filter {ps_quote(name_filter)} |
        Select-Object Name |
        ConvertTo-Csv -NoTypeInformation
        '''
        return [row["Name"] for row in self._csv(ps)]

    def query_recovery_records(self):
        recovery_ps = f'''
        Get-ADObject -Filter "objectClass -eq 'msFVE-RecoveryInformation'" -Properties msFVE-RecoveryPassword, whenCreated |
        Select-Object DistinguishedName,
        @{{Name="RecoveryPassword";Expression={{$_."msFVE-RecoveryPassword"}}}},
        {ps_date_property("whenCreated")} |
        ConvertTo-Csv -NoTypeInformation
        '''
        return [
            RecoveryRecord(
                distinguished_name=row["DistinguishedName"],
                recovery_password=row.get("RecoveryPassword", ""),
                when_created=parse_ps_date(row.get("whenCreated")),
            )
            for row in self._csv(recovery_ps)
        ]

    def query_users(self):
        user_ps = f'''
        Get-ADUser -Filter "Enabled -eq 'True'" -Properties Surname, GivenName, whenCreated, LastLogonDate, MemberOf |
        Select-Object SamAccountName, Surname, GivenName, DistinguishedName,
        {ps_date_property("whenCreated")},
        {ps_date_property("LastLogonDate")},
        @{{Name="MemberOf";Expression={{($_.MemberOf -join ";")}}}} |
        ConvertTo-Csv -NoTypeInformation
        '''
        return self._build(self._csv(user_ps), user_from_row)

    def get_computer_state(self, sam_account_name):
        ps = f'''
        Get-ADComputer -Identity {ps_quote(sam_account_name)} |
        Select-Object DistinguishedName, Enabled |
        ConvertTo-Csv -NoTypeInformation
        '''
        rows = self._csv(ps)
        if not rows:
            raise LookupError(f"Computer {sam_account_name} not found")
        return AccountState(rows[0]["DistinguishedName"], parse_bool(rows[0]["Enabled"]))

    def container_exists(self, dn):
        ps = (
            f"if (Get-ADObject -LDAPFilter {ps_quote('(distinguishedName=' + ldap_escape(dn) + ')')}) "
            '{ "True" } else { "False" }'
        )
        return parse_bool(self._run(ps))

    # -- mutations --------------------------------------------------------

    def create_container(self, parent, name):
        ps = (
            f"New-ADOrganizationalUnit -Name {ps_quote(name)} -Path {ps_quote(parent)} "
            "-ProtectedFromAccidentalDeletion $false -PassThru | "
            "Select-Object -ExpandProperty DistinguishedName"
        )
        return self._run(ps) or f"OU={name},{parent}"

    def disable_account(self, dn):
        self._run(f"Disable-ADAccount -Identity {ps_quote(dn)}")

    def move_object(self, dn, target):
        self._run(f"Move-ADObject -Identity {ps_quote(dn)} -TargetPath {ps_quote(target)}")

    def set_computer_attribute(self, sam_account_name, attribute, value):
        self._run(
            f"Set-ADComputer -Identity {ps_quote(sam_account_name)} "
            f"-Replace @{{{ps_quote(attribute)}={ps_quote(value)}}}"
        )


def computer_from_row(row):
    return ComputerRecord(
        name=row["Name"],
        sam_account_name=row.get("SamAccountName") or row["Name"] + "$",
        distinguished_name=row["DistinguishedName"],
        operating_system=row.get("OperatingSystem", ""),
        enabled=parse_bool(row.get("Enabled", "True")),
        when_created=parse_ps_date(row.get("whenCreated")),
        when_changed=parse_ps_date(row.get("whenChanged")),
        password_last_set=parse_ps_date(row.get("PasswordLastSet")),
        recovery_expiration=parse_filetime(row.get("AdmPwdExpirationTime")),
        last_logon=parse_ps_date(row.get("LastLogonDate")),
    )


def user_from_row(row):
    return UserRecord(
        sam_account_name=row["SamAccountName"],
        distinguished_name=row["DistinguishedName"],
        given_name=row.get("GivenName", ""),
        surname=row.get("Surname", ""),
        member_of=row.get("MemberOf", ""),
        when_created=parse_ps_date(row.get("whenCreated")),
        last_logon=parse_ps_date(row.get("LastLogonDate")),
    )
