import dataclasses

import pytest

from adcleaner.cleanup import is_stale, is_workstation, select_stale_computers

from .conftest import NOW, FakeDirectory, days_ago, make_computer


def names(records):
    return [r.name for r in records]


def test_ws01_with_no_managed_password_is_stale() -> None:
    directory = FakeDirectory([make_computer("WS01", changed=200, password=200, expiration=None)])

    assert names(select_stale_computers(directory, 185, now=NOW)) == ["WS01"]


def test_ws02_with_fresh_recovery_expiration_is_kept() -> None:
    directory = FakeDirectory([make_computer("WS02", changed=200, password=200, expiration=10)])

    assert select_stale_computers(directory, 185, now=NOW) == []


def test_any_fresh_signal_excludes_the_computer() -> None:
    directory = FakeDirectory([
        make_computer("FRESH-CHANGE", changed=30),
        make_computer("FRESH-PASSWORD", password=30),
        make_computer("FRESH-EXPIRY", expiration=-20),
        make_computer("OLD", expiration=400),
    ])

    assert names(select_stale_computers(directory, 185, now=NOW)) == ["OLD"]


def test_threshold_boundary_is_not_stale() -> None:
    threshold = days_ago(185)
    on_boundary = dataclasses.replace(make_computer("EDGE"), when_changed=threshold)

    assert not is_stale(on_boundary, threshold)


def test_missing_dates_fall_back_to_creation() -> None:
    computer = make_computer("NEVER", changed=None, password=None)

    assert is_stale(computer, days_ago(185))


def test_servers_and_disabled_computers_are_ignored() -> None:
    directory = FakeDirectory([
        make_computer("SRV01", operating_system="Windows Server 2019 Standard"),
        make_computer("WS09", enabled=False),
        make_computer("ws10", operating_system="WINDOWS 10 PRO"),
    ])

    assert names(select_stale_computers(directory, 185, now=NOW)) == ["ws10"]


def test_os_match_is_configurable() -> None:
    computer = make_computer("SRV01", operating_system="Windows Server 2022")

    assert is_workstation(computer, ["server"])
    assert not is_workstation(computer)


def test_result_is_sorted_by_name() -> None:
    directory = FakeDirectory([make_computer("WS20"), make_computer("ws05"), make_computer("WS11")])

    assert names(select_stale_computers(directory, now=NOW)) == ["ws05", "WS11", "WS20"]


@pytest.mark.parametrize("days", [0, -5])
def test_max_age_must_be_positive(days) -> None:
    with pytest.raises(ValueError):
        select_stale_computers(FakeDirectory(), days, now=NOW)


def test_query_failure_propagates() -> None:
    class Broken(FakeDirectory):
        def query_computers(self):
            raise RuntimeError("server is not operational")

    with pytest.raises(RuntimeError, match="not operational"):
        select_stale_computers(Broken(), now=NOW)
