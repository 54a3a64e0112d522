"""Stale computer cleanup: select, back up, then disable and move.

The three stages are run one after another by an operator, who picks the
records handed from one stage to the next. A backup must be written before
anything is decommissioned.
"""

import json
import os
import tempfile
from datetime import datetime, timedelta, timezone

from .directory import parent_dn
from .models import (
    DECOMMISSIONED,
    FAILED,
    UNCHANGED,
    ArchivedComputer,
    BackupSnapshot,
    DecommissionBatch,
    RecordOutcome,
)
from .powershell import PowerShellError

DEFAULT_MAX_AGE_DAYS = 185
DEFAULT_OS_MATCH = ("Windows 10", "Windows 11")
STAMP_FORMAT = "%Y%m%d-%H%M%S"
RECOVERY_MATCH_MODES = ("substring", "parent")


class ContainerNotFoundError(LookupError):
    pass


def _now(now=None):
    return now or datetime.now(timezone.utc)


def _report(progress, done, total, label):
    if progress is not None:
        progress(done, total, label)


def unique_name(base, taken):
    """``base`` if free, otherwise ``base-1``, ``base-2``, ..."""
    if not taken(base):
        return base
    n = 1
    while taken(f"{base}-{n}"):
        n += 1
    return f"{base}-{n}"





'''
###########################################
Find workstations nobody has touched lately.
###########################################

9/16/2026
'''
def is_stale(computer, threshold) -> bool:
    # Every signal has to be old; one fresh signal keeps the machine.
    changed = computer.when_changed or computer.when_created
    password = computer.password_last_set or computer.when_created
    if changed is None or changed >= threshold:
        return False
    if password is None or password >= threshold:
        return False
    expiration = computer.recovery_expiration
    return expiration is None or expiration < threshold


def is_workstation(computer, os_match=DEFAULT_OS_MATCH) -> bool:
    operating_system = (computer.operating_system or "").lower()
    return any(match.lower() in operating_system for match in os_match)


def select_stale_computers(directory, max_age_days: int = DEFAULT_MAX_AGE_DAYS, *, os_match=DEFAULT_OS_MATCH, now=None):
    if max_age_days <= 0:
        raise ValueError(f"max_age_days must be positive, got {max_age_days}")

    threshold = _now(now) - timedelta(days=max_age_days)
    stale = [
        computer
        for computer in directory.query_computers()
        if computer.enabled and is_workstation(computer, os_match) and is_stale(computer, threshold)
    ]
    return sorted(stale, key=lambda c: c.name.lower())





'''
#################################################
Back up computers and their BitLocker keys first.
#################################################

9/17/2026
'''
def recovery_matches(computer_dn, recovery_dn, mode="substring") -> bool:
    if mode == "substring":
        return computer_dn.lower() in recovery_dn.lower()
    if mode == "parent":
        return parent_dn(recovery_dn).lower() == computer_dn.lower()
    raise ValueError(f"Unknown recovery match mode {mode!r}")


def backup_path(directory, prefix="ComputerBackup", now=None, ext="json"):
    stamp = _now(now).strftime(STAMP_FORMAT)
    base = unique_name(
        f"{prefix}_{stamp}",
        lambda name: os.path.exists(os.path.join(directory, f"{name}.{ext}")),
    )
    return os.path.join(directory, f"{base}.{ext}")


def archive(directory, selected, destination, *, match="substring", now=None, progress=None) -> BackupSnapshot:
    if match not in RECOVERY_MATCH_MODES:
        raise ValueError(f"Unknown recovery match mode {match!r}")

    recovery_records = directory.query_recovery_records() if selected else []

    archived = []
    total = len(selected)
    for i, computer in enumerate(selected, start=1):
        matched = tuple(
            r for r in recovery_records
            if recovery_matches(computer.distinguished_name, r.distinguished_name, match)
        )
        archived.append(ArchivedComputer(computer=computer, recovery_records=matched))
        _report(progress, i, total, computer.name)

    snapshot = BackupSnapshot(created=_now(now), computers=tuple(archived))
    write_snapshot(snapshot, destination)
    return snapshot


def write_snapshot(snapshot, destination):
    folder = os.path.dirname(destination)
    if folder:
        os.makedirs(folder, exist_ok=True)

    # Write beside the destination, then swap it in so a backup is never half written.
    fd, temp_path = tempfile.mkstemp(prefix=".backup-", suffix=".tmp", dir=folder or ".")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(snapshot.to_dict(), f, indent=2)
        os.replace(temp_path, destination)
    except BaseException:
        os.remove(temp_path)
        raise


def load_snapshot(path) -> BackupSnapshot:
    with open(path, "r", encoding="utf-8") as f:
        return BackupSnapshot.from_dict(json.load(f))


def latest_backup(directory, prefix="ComputerBackup"):
    if not os.path.isdir(directory):
        return None
    backups = [
        os.path.join(directory, name)
        for name in os.listdir(directory)
        if name.startswith(prefix + "_") and name.endswith(".json")
    ]
    return max(backups, key=os.path.getmtime) if backups else None





'''
##############################################
Disable backed up computers and move them away.
##############################################

9/18/2026
'''
def decommission_one(directory, archived, container_dn, target_container) -> RecordOutcome:
    computer = archived.computer
    outcome = RecordOutcome(name=computer.name, status=UNCHANGED)
    try:
        state = directory.get_computer_state(computer.sam_account_name)
        current_parent = parent_dn(state.distinguished_name).lower()
        in_original_place = current_parent == parent_dn(computer.distinguished_name).lower()
        in_batch_container = parent_dn(current_parent) == target_container.lower()

        # Somebody else moved it after the backup; leave it alone.
        if not in_original_place and not in_batch_container:
            outcome.status = FAILED
            outcome.error = f"Moved since backup to {parent_dn(state.distinguished_name)}"
            return outcome

        if state.enabled:
            directory.disable_account(state.distinguished_name)
            outcome.disabled = True

        if in_original_place:
            directory.move_object(state.distinguished_name, container_dn)
            outcome.moved = True
    except (PowerShellError, LookupError) as e:
        outcome.status = FAILED
        outcome.error = str(e)
        return outcome

    if outcome.disabled or outcome.moved:
        outcome.status = DECOMMISSIONED
    return outcome


def decommission(directory, selected, target_container, *, prefix="Decommissioned", now=None, progress=None) -> DecommissionBatch:
    if not directory.container_exists(target_container):
        raise ContainerNotFoundError(f"Container {target_container} does not exist")

    created = _now(now)
    name = unique_name(
        f"{prefix}_{created.strftime(STAMP_FORMAT)}",
        lambda candidate: directory.container_exists(f"OU={candidate},{target_container}"),
    )
    container_dn = directory.create_container(target_container, name)

    batch = DecommissionBatch(name=name, distinguished_name=container_dn, created=created)
    total = len(selected)
    for i, archived in enumerate(selected, start=1):
        batch.outcomes.append(decommission_one(directory, archived, container_dn, target_container))
        _report(progress, i, total, archived.name)
    return batch
