from adcleaner.firewall import check_firewall, firewall_command

from .conftest import FakeRunner

ALL_ON = '"Name","Enabled"\n"Domain","True"\n"Private","True"\n"Public","True"\n'
PUBLIC_OFF = '"Name","Enabled"\n"Domain","True"\n"Private","True"\n"Public","False"\n'


def test_check_firewall_reports_each_host() -> None:
    runner = FakeRunner()
    runner.add("'SRV01'", ALL_ON)
    runner.add("'SRV02'", PUBLIC_OFF)
    runner.add("'SRV03'", returncode=1, stderr="WinRM cannot complete the operation.")

    srv01, srv02, srv03 = check_firewall(["SRV01", "SRV02", "SRV03"], runner)

    assert srv01.compliant
    assert srv02.profiles["Public"] is False
    assert not srv02.compliant
    assert not srv03.compliant
    assert "WinRM" in srv03.error
    assert srv02.as_row() == {
        "Host": "SRV02", "Compliant": False, "Domain": True, "Private": True, "Public": False, "Error": "",
    }


def test_no_profiles_is_not_compliant() -> None:
    (status,) = check_firewall(["SRV01"], FakeRunner())

    assert not status.compliant
    assert status.error


def test_firewall_command_uses_remoting() -> None:
    command = firewall_command("SRV01")

    assert "Invoke-Command -ComputerName 'SRV01'" in command
    assert "Get-NetFirewallProfile" in command
