"""
Bootstrap — default accounts and starter personnel.

Usage::

    seed = load_seed("~/.lineal/seed.yaml")   # or default_seed()
    report = bootstrap(store, seed)

``bootstrap`` runs once at process start, before any login. It adds the
seed SUPER_ADMIN and ADMIN accounts if no account with their email
exists yet (default password, rotation forced), and writes the starter
personnel only when the personnel collection is empty. Running it again
against a populated store performs no writes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from lineal.core.constants import DEFAULT_ADMIN_EMAIL, DEFAULT_PASSWORD, DEFAULT_SUPER_ADMIN_EMAIL
from lineal.core.exceptions import SeedParseError
from lineal.core.models import Personnel, PublicUser, Rank, Role, UserAccount
from lineal.core.store.repository import RecordStore

_SEED_CREATED_AT = datetime(2024, 1, 1, tzinfo=UTC)


class SeedData(BaseModel):
    """Fixed account shapes and starter roster consumed by bootstrap."""

    super_admin: PublicUser
    admin: PublicUser
    personnel: list[Personnel] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_roles(self) -> SeedData:
        if self.super_admin.role != Role.SUPER_ADMIN:
            raise ValueError("super_admin seed account must have role SUPER_ADMIN")
        if self.admin.role != Role.ADMIN:
            raise ValueError("admin seed account must have role ADMIN")
        if self.super_admin.email == self.admin.email:
            raise ValueError("seed accounts must have distinct emails")
        ids = [p.id for p in self.personnel]
        if len(ids) != len(set(ids)):
            raise ValueError("seed personnel ids must be unique")
        return self


@dataclass
class BootstrapReport:
    users_created: list[str] = field(default_factory=list)  # emails
    personnel_seeded: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.users_created or self.personnel_seeded)


def bootstrap(
    store: RecordStore, seed: SeedData, default_password: str = DEFAULT_PASSWORD
) -> BootstrapReport:
    """Ensure the seed accounts and starter personnel exist exactly once."""
    report = BootstrapReport()

    def add_accounts(users: list[UserAccount]) -> list[UserAccount]:
        emails = {u.email for u in users}
        for template in (seed.super_admin, seed.admin):
            if template.email in emails:
                continue
            account = UserAccount.model_validate(
                {
                    **template.model_dump(),
                    "password": default_password,
                    "must_change_password": True,
                }
            )
            users.append(account)
            emails.add(account.email)
            report.users_created.append(account.email)
        return users

    def add_starter_personnel(personnel: list[Personnel]) -> list[Personnel]:
        if personnel or not seed.personnel:
            return personnel
        report.personnel_seeded = len(seed.personnel)
        return list(seed.personnel)

    store.users.mutate(add_accounts)
    store.personnel.mutate(add_starter_personnel)
    return report


# ---------------------------------------------------------------------------
# Seed providers
# ---------------------------------------------------------------------------


def load_seed(path: str | Path) -> SeedData:
    """
    Load and validate seed data from a YAML file.

    Raises:
        SeedParseError: if the file is missing, unreadable, or invalid.
    """
    p = Path(path).expanduser()
    if not p.exists():
        raise SeedParseError(f"Seed file not found: {p}")
    try:
        content = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise SeedParseError(f"Cannot read seed file {p}: {exc}") from exc
    return parse_seed(content, source=str(p))


def parse_seed(yaml_text: str, source: str = "<string>") -> SeedData:
    """Parse and validate a YAML seed document."""
    try:
        data = yaml.safe_load(yaml_text)
    except yaml.YAMLError as exc:
        raise SeedParseError(f"YAML syntax error in {source}: {exc}") from exc

    if not isinstance(data, dict):
        raise SeedParseError(f"Seed file {source} must be a YAML mapping")

    try:
        return SeedData.model_validate(data)
    except ValidationError as exc:
        raise SeedParseError(f"Invalid seed data in {source}:\n{exc}") from exc


def default_seed(
    super_admin_email: str = DEFAULT_SUPER_ADMIN_EMAIL,
    admin_email: str = DEFAULT_ADMIN_EMAIL,
) -> SeedData:
    """Built-in seed: one account per role and a small starter roster."""
    return SeedData(
        super_admin=PublicUser(
            id="user-superadmin",
            first_name="System",
            last_name="Administrator",
            email=super_admin_email,
            role=Role.SUPER_ADMIN,
            rank=Rank.JSUP,
            created_at=_SEED_CREATED_AT,
        ),
        admin=PublicUser(
            id="user-admin",
            first_name="Records",
            last_name="Officer",
            email=admin_email,
            role=Role.ADMIN,
            rank=Rank.JINSP,
            created_at=_SEED_CREATED_AT,
        ),
        personnel=[Personnel.model_validate(p) for p in _STARTER_PERSONNEL],
    )


_STARTER_PERSONNEL: list[dict[str, object]] = [
    {
        "id": "p-001",
        "rank": "JSUP",
        "lastName": "Dela Cruz",
        "firstName": "Juan",
        "middleName": "Santos",
        "gender": "Male",
        "officeAssignment": ["Regional Office"],
        "designation": ["Regional Director"],
        "education": "Master in Public Administration",
        "eligibility": "CSC Professional",
        "dateOfBirth": "1972-03-14",
        "dateOfAppointment": "1996-07-01",
        "dateOfLastPromotion": "2021-01-15",
        "trainingType": "PSOSEC",
        "status": "Active",
    },
    {
        "id": "p-002",
        "rank": "JCINSP",
        "lastName": "Reyes",
        "firstName": "Maria",
        "middleName": "Lopez",
        "gender": "Female",
        "officeAssignment": ["Tacloban City Jail", "Regional Office"],
        "designation": ["Warden", "Chief, Admin Division"],
        "education": "BS Criminology",
        "eligibility": "RA 1080 (Criminologist)",
        "dateOfBirth": "1980-11-02",
        "dateOfAppointment": "2004-05-17",
        "dateOfLastPromotion": "2019-06-30",
        "trainingType": "OAC",
        "status": "Active",
    },
    {
        "id": "p-003",
        "rank": "SJO2",
        "lastName": "Villanueva",
        "firstName": "Roberto",
        "gender": "Male",
        "officeAssignment": ["Ormoc City Jail"],
        "designation": ["Custodial Officer"],
        "education": "BS Criminology",
        "eligibility": "RA 1080 (Criminologist)",
        "dateOfBirth": "1978-08-21",
        "dateOfAppointment": "2002-02-11",
        "status": "Active",
        "remarks": "ON-JSLC-SCHOOLING(15/March/2025)",
    },
    {
        "id": "p-004",
        "rank": "JO2",
        "lastName": "Garcia",
        "firstName": "Ana",
        "middleName": "Bautista",
        "gender": "Female",
        "officeAssignment": ["Catbalogan District Jail"],
        "designation": ["Records Officer"],
        "education": "BS Psychology",
        "eligibility": "CSC Professional",
        "dateOfBirth": "1993-04-09",
        "dateOfAppointment": "2017-09-04",
        "trainingType": "JBRC",
        "status": "Active",
    },
    {
        "id": "p-005",
        "rank": "JO1",
        "lastName": "Santos",
        "firstName": "Mark",
        "extension": "Jr.",
        "gender": "Male",
        "officeAssignment": ["Borongan District Jail"],
        "designation": ["Escort Officer"],
        "education": "BS Criminology",
        "eligibility": "RA 1080 (Criminologist)",
        "dateOfBirth": "1997-12-30",
        "dateOfAppointment": "2022-03-01",
        "status": "Suspended",
    },
]
