import csv
import io
import os
import subprocess
from datetime import datetime, timedelta, timezone

# Disable PowerShell window for Windows 10+
if os.name == "nt":
    CREATE_NO_WINDOW = 0x08000000
else:
    CREATE_NO_WINDOW = 0

PS_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)


class PowerShellError(RuntimeError):
    """A PowerShell process exited non-zero."""

    def __init__(self, command, stderr):
        self.command = command
        self.stderr = (stderr or "").strip()
        super().__init__(self.stderr or "PowerShell exited with an error")





'''
##################################
Run windowless PowerShell command.
##################################

5/30/2025
'''
def run_powershell_command(ps_command):
    result = subprocess.run(
        ["powershell", "-NoProfile", "-Command", ps_command],
        capture_output=True,
        text=True,
        creationflags=CREATE_NO_WINDOW
    )
    return result





'''
#########################################################
Run a command and hand back stdout, raising when it fails.
#########################################################

9/14/2026
'''
def invoke(ps_command, runner=None) -> str:
    runner = runner or run_powershell_command
    process = runner(ps_command)
    if process.returncode != 0:
        raise PowerShellError(ps_command, process.stderr)
    return process.stdout


def invoke_csv(ps_command, runner=None) -> list:
    """Run a command ending in ``ConvertTo-Csv -NoTypeInformation`` and return its rows."""
    return parse_csv(invoke(ps_command, runner))


def parse_csv(text):
    if not text or not text.strip():
        return []
    reader = csv.DictReader(io.StringIO(text.strip()))
    return [dict(row) for row in reader]





'''
###############################################
Quote values before they go into a PS script.
###############################################

9/14/2026
'''
def ps_quote(value) -> str:
    return "'" + str(value).replace("'", "''") + "'"


def ldap_escape(value) -> str:
    value = str(value)
    value = value.replace("\\", r"\5c")
    value = value.replace("*", r"\2a")
    value = value.replace("(", r"\28")
    value = value.replace(")", r"\29")
    value = value.replace("\x00", r"\00")
    return value


def ps_date_property(name, source=None):
    """Calculated property that renders a DateTime as UTC text, or nothing when unset."""
    source = source or name
    return (
        f'@{{Name="{name}";Expression={{ if ($_."{source}") '
        f'{{ $_."{source}".ToUniversalTime().ToString("yyyy-MM-dd HH:mm:ss") }} }}}}'
    )





'''
####################################
Turn CSV cells back into Python values.
####################################

9/15/2026
'''
def parse_ps_date(value):
    value = (value or "").strip()
    if not value:
        return None
    return datetime.strptime(value, PS_DATE_FORMAT).replace(tzinfo=timezone.utc)


def parse_filetime(value):
    # 0 and blank both mean the attribute was never populated.
    value = (value or "").strip()
    if not value or int(value) <= 0:
        return None
    try:
        return FILETIME_EPOCH + timedelta(microseconds=int(value) // 10)
    except OverflowError:
        return datetime.max.replace(tzinfo=timezone.utc)


def parse_bool(value) -> bool:
    return str(value).strip().lower() == "true"





'''
########################
Ensure RSAT is installed
########################

6/2/2025
'''
def ad_tools_available(runner=None) -> bool:
    runner = runner or run_powershell_command
    test_command = "Get-Command -Name Get-ADComputer -ErrorAction SilentlyContinue"
    result = runner(test_command)
    return bool(result.stdout.strip())
