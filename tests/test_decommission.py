import pytest

from adcleaner.cleanup import ContainerNotFoundError, decommission, unique_name
from adcleaner.models import DECOMMISSIONED, FAILED, UNCHANGED, ArchivedComputer

from .conftest import NOW, FakeDirectory, make_computer

PARENT = "OU=Disabled Computers,DC=corp,DC=example,DC=com"


def archived(*names):
    return [ArchivedComputer(make_computer(name)) for name in names]


def directory_for(selection):
    return FakeDirectory([a.computer for a in selection], containers=[PARENT])


def test_n_records_get_n_disables_and_n_moves_into_one_container() -> None:
    selection = archived("WS01", "WS02", "WS03")
    directory = directory_for(selection)

    batch = decommission(directory, selection, PARENT, now=NOW)

    assert directory.created == [f"OU=Decommissioned_20261001-120000,{PARENT}"]
    assert batch.distinguished_name == directory.created[0]
    assert len(directory.disabled) == 3
    assert len(directory.moved) == 3
    assert {target for _, target in directory.moved} == {batch.distinguished_name}
    assert [o.status for o in batch.outcomes] == [DECOMMISSIONED] * 3


def test_missing_parent_container_is_fatal() -> None:
    selection = archived("WS01")
    directory = FakeDirectory([a.computer for a in selection])

    with pytest.raises(ContainerNotFoundError):
        decommission(directory, selection, PARENT, now=NOW)

    assert directory.created == []
    assert directory.disabled == []


def test_container_name_gets_a_suffix_when_taken() -> None:
    selection = archived("WS01")
    directory = directory_for(selection)
    directory.containers.add(f"OU=Decommissioned_20261001-120000,{PARENT}".lower())

    batch = decommission(directory, selection, PARENT, now=NOW)

    assert batch.name == "Decommissioned_20261001-120000-1"


def test_one_failure_does_not_stop_the_batch() -> None:
    selection = archived("WS01", "WS02", "WS03")
    directory = directory_for(selection)
    directory.fail_on[selection[1].computer.distinguished_name] = "disable"

    batch = decommission(directory, selection, PARENT, now=NOW)

    assert [o.status for o in batch.outcomes] == [DECOMMISSIONED, FAILED, DECOMMISSIONED]
    assert [o.name for o in batch.failed] == ["WS02"]
    assert "Access is denied" in batch.failed[0].error
    assert len(batch.succeeded) == 2


def test_failed_move_leaves_record_disabled_and_reports_it() -> None:
    selection = archived("WS01")
    directory = directory_for(selection)
    directory.fail_on[selection[0].computer.distinguished_name] = "move"

    outcome = decommission(directory, selection, PARENT, now=NOW).outcomes[0]

    assert outcome.status == FAILED
    assert outcome.disabled
    assert not outcome.moved


def test_rerun_after_partial_failure_only_moves() -> None:
    selection = archived("WS01")
    directory = directory_for(selection)
    dn = selection[0].computer.distinguished_name
    directory.fail_on[dn] = "move"
    decommission(directory, selection, PARENT, now=NOW)
    del directory.fail_on[dn]

    outcome = decommission(directory, selection, PARENT, now=NOW).outcomes[0]

    assert outcome.status == DECOMMISSIONED
    assert not outcome.disabled
    assert outcome.moved
    assert len(directory.disabled) == 1


def test_rerun_on_finished_records_is_a_no_op() -> None:
    selection = archived("WS01", "WS02")
    directory = directory_for(selection)
    decommission(directory, selection, PARENT, now=NOW)

    again = decommission(directory, selection, PARENT, now=NOW)

    assert [o.status for o in again.outcomes] == [UNCHANGED, UNCHANGED]
    assert len(directory.disabled) == 2
    assert len(directory.moved) == 2


def test_unknown_account_is_reported_as_failed() -> None:
    directory = FakeDirectory(containers=[PARENT])

    batch = decommission(directory, archived("GONE01"), PARENT, now=NOW)

    assert batch.outcomes[0].status == FAILED
    assert "GONE01$" in batch.outcomes[0].error


def test_empty_selection_still_creates_the_container() -> None:
    directory = FakeDirectory(containers=[PARENT])

    batch = decommission(directory, [], PARENT, prefix="Cleanup", now=NOW)

    assert batch.outcomes == []
    assert directory.created == [f"OU=Cleanup_20261001-120000,{PARENT}"]


def test_unique_name() -> None:
    taken = {"a", "a-1", "a-2"}

    assert unique_name("b", taken.__contains__) == "b"
    assert unique_name("a", taken.__contains__) == "a-3"


def test_computer_moved_elsewhere_since_backup_is_left_alone() -> None:
    selection = archived("WS01", "WS02")
    directory = directory_for(selection)
    directory.accounts["ws01$"] = directory.accounts["ws01$"]._replace(
        distinguished_name="CN=WS01,OU=Lab,DC=corp,DC=example,DC=com"
    )

    batch = decommission(directory, selection, PARENT, now=NOW)
    ws01, ws02 = batch.outcomes

    assert ws01.status == FAILED
    assert not ws01.disabled
    assert not ws01.moved
    assert "OU=Lab,DC=corp,DC=example,DC=com" in ws01.error
    assert [o.name for o in batch.failed] == ["WS01"]
    assert ws02.status == DECOMMISSIONED
    assert directory.disabled == [selection[1].computer.distinguished_name]
    assert len(directory.moved) == 1


def test_computer_in_an_earlier_batch_container_counts_as_moved() -> None:
    selection = archived("WS01")
    directory = directory_for(selection)
    directory.accounts["ws01$"] = directory.accounts["ws01$"]._replace(
        distinguished_name=f"CN=WS01,OU=Decommissioned_20260901-080000,{PARENT}"
    )

    outcome = decommission(directory, selection, PARENT, now=NOW).outcomes[0]

    assert outcome.status == DECOMMISSIONED
    assert outcome.disabled
    assert not outcome.moved
