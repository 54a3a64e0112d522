"""Records passed between the cleanup stages and written to backup files."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

BACKUP_FORMAT = "adcleaner-computer-backup"
BACKUP_VERSION = 1


def _dump_date(value):
    return value.isoformat() if value is not None else None


def _load_date(value):
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True)
class ComputerRecord:
    name: str
    sam_account_name: str
    distinguished_name: str
    operating_system: str = ""
    enabled: bool = True
    when_created: Optional[datetime] = None
    when_changed: Optional[datetime] = None
    password_last_set: Optional[datetime] = None
    recovery_expiration: Optional[datetime] = None
    last_logon: Optional[datetime] = None

    def to_dict(self):
        return {
            "name": self.name,
            "sam_account_name": self.sam_account_name,
            "distinguished_name": self.distinguished_name,
            "operating_system": self.operating_system,
            "enabled": self.enabled,
            "when_created": _dump_date(self.when_created),
            "when_changed": _dump_date(self.when_changed),
            "password_last_set": _dump_date(self.password_last_set),
            "recovery_expiration": _dump_date(self.recovery_expiration),
            "last_logon": _dump_date(self.last_logon),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            name=data["name"],
            sam_account_name=data["sam_account_name"],
            distinguished_name=data["distinguished_name"],
            operating_system=data.get("operating_system", ""),
            enabled=data.get("enabled", True),
            when_created=_load_date(data.get("when_created")),
            when_changed=_load_date(data.get("when_changed")),
            password_last_set=_load_date(data.get("password_last_set")),
            recovery_expiration=_load_date(data.get("recovery_expiration")),
            last_logon=_load_date(data.get("last_logon")),
        )


@dataclass(frozen=True)
class RecoveryRecord:
    """A BitLocker recovery object; it lives underneath its computer in the tree."""

    distinguished_name: str
    recovery_password: str = ""
    when_created: Optional[datetime] = None

    def to_dict(self):
        return {
            "distinguished_name": self.distinguished_name,
            "recovery_password": self.recovery_password,
            "when_created": _dump_date(self.when_created),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            distinguished_name=data["distinguished_name"],
            recovery_password=data.get("recovery_password", ""),
            when_created=_load_date(data.get("when_created")),
        )


@dataclass(frozen=True)
class ArchivedComputer:
    computer: ComputerRecord
    recovery_records: tuple = ()

    @property
    def name(self):
        return self.computer.name

    def to_dict(self):
        data = self.computer.to_dict()
        data["recovery_records"] = [r.to_dict() for r in self.recovery_records]
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            computer=ComputerRecord.from_dict(data),
            recovery_records=tuple(RecoveryRecord.from_dict(r) for r in data.get("recovery_records", [])),
        )


@dataclass(frozen=True)
class BackupSnapshot:
    created: datetime
    computers: tuple = ()

    def __len__(self):
        return len(self.computers)

    def to_dict(self):
        return {
            "format": BACKUP_FORMAT,
            "version": BACKUP_VERSION,
            "created": _dump_date(self.created),
            "computers": [c.to_dict() for c in self.computers],
        }

    @classmethod
    def from_dict(cls, data):
        if data.get("format") != BACKUP_FORMAT:
            raise ValueError(f"Not a computer backup file (format={data.get('format')!r})")
        if data.get("version") != BACKUP_VERSION:
            raise ValueError(f"Unsupported backup version {data.get('version')!r}")
        return cls(
            created=_load_date(data["created"]),
            computers=tuple(ArchivedComputer.from_dict(c) for c in data["computers"]),
        )


# Outcome statuses
DECOMMISSIONED = "decommissioned"
UNCHANGED = "unchanged"
FAILED = "failed"


@dataclass
class RecordOutcome:
    name: str
    status: str
    disabled: bool = False
    moved: bool = False
    error: str = ""

    def as_row(self):
        return {
            "Name": self.name,
            "Status": self.status,
            "Disabled": self.disabled,
            "Moved": self.moved,
            "Error": self.error,
        }


@dataclass
class DecommissionBatch:
    name: str
    distinguished_name: str
    created: datetime
    outcomes: List[RecordOutcome] = field(default_factory=list)

    @property
    def failed(self):
        return [o for o in self.outcomes if o.status == FAILED]

    @property
    def succeeded(self):
        return [o for o in self.outcomes if o.status != FAILED]


@dataclass(frozen=True)
class UserRecord:
    sam_account_name: str
    distinguished_name: str
    given_name: str = ""
    surname: str = ""
    member_of: str = ""
    when_created: Optional[datetime] = None
    last_logon: Optional[datetime] = None

    def as_row(self):
        return {
            "SamAccountName": self.sam_account_name,
            "GivenName": self.given_name,
            "Surname": self.surname,
            "whenCreated": _dump_date(self.when_created),
            "LastLogonDate": _dump_date(self.last_logon),
            "DistinguishedName": self.distinguished_name,
        }
