"""Stamp the last logged on user into a computer attribute from logon telemetry."""

import csv
from collections import namedtuple
from dataclasses import dataclass
from datetime import datetime, timezone

from .powershell import PowerShellError

LogonEvent = namedtuple("LogonEvent", ["computer", "user", "time"])


@dataclass
class LogonOutcome:
    computer: str
    value: str
    updated: bool = False
    error: str = ""

    def as_row(self):
        return {"ComputerName": self.computer, "Value": self.value, "Updated": self.updated, "Error": self.error}


def parse_logon_time(value):
    moment = datetime.fromisoformat(value.strip())
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def read_logon_telemetry(path):
    """Latest logon per computer from a ``ComputerName,UserName,LogonTime`` CSV.

    Returns ``(latest, skipped)`` where ``skipped`` holds rows that could not be read.
    """
    latest = {}
    skipped = []
    with open(path, newline="", encoding="utf-8-sig") as f:
        for row in csv.DictReader(f):
            computer = (row.get("ComputerName") or "").strip()
            user = (row.get("UserName") or "").strip()
            try:
                moment = parse_logon_time(row.get("LogonTime") or "")
            except ValueError:
                skipped.append(row)
                continue
            if not computer or not user:
                skipped.append(row)
                continue

            key = computer.lower()
            if key not in latest or moment > latest[key].time:
                latest[key] = LogonEvent(computer, user, moment)
    return latest, skipped


def format_logon(event):
    return f"{event.user} {event.time.strftime('%Y-%m-%d %H:%M')}"


def update_logon_attributes(directory, events, attribute="description", dry_run=False, progress=None):
    outcomes = []
    events = sorted(events, key=lambda e: e.computer.lower())
    for i, event in enumerate(events, start=1):
        outcome = LogonOutcome(computer=event.computer, value=format_logon(event))
        if not dry_run:
            try:
                directory.set_computer_attribute(event.computer + "$", attribute, outcome.value)
                outcome.updated = True
            except PowerShellError as e:
                outcome.error = str(e)
        outcomes.append(outcome)
        if progress is not None:
            progress(i, len(events), event.computer)
    return outcomes
