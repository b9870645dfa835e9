"""
Typed records stored in the Lineal collections.

Field names are snake_case in Python and camelCase on disk, so stored
blobs keep the ``firstName`` / ``mustChangePassword`` / ``performedBy``
layout of the original roster data.

The user record comes in two shapes that are never mixed:

  UserAccount  — credentialed view, carries ``password``; only used
                 inside authentication and the repository layer
  PublicUser   — listing view without ``password``; what every UI
                 consumer receives
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lineal.core.constants import RETIREMENT_AGE_YEARS


class Role(StrEnum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"


class Rank(StrEnum):
    """Ranks, declared highest first."""

    JDIR = "JDIR"
    JCSUP = "JCSUP"
    JSSUP = "JSSUP"
    JSUP = "JSUP"
    JCINSP = "JCINSP"
    JSINSP = "JSINSP"
    JINSP = "JINSP"
    SJO4 = "SJO4"
    SJO3 = "SJO3"
    SJO2 = "SJO2"
    SJO1 = "SJO1"
    JO3 = "JO3"
    JO2 = "JO2"
    JO1 = "JO1"
    JO1_T = "JO1/T"
    NUP = "NUP"


RANK_ORDER: tuple[Rank, ...] = tuple(Rank)


def rank_index(rank: Rank) -> int:
    """Seniority position of *rank*; 0 is the most senior."""
    return RANK_ORDER.index(rank)


class Gender(StrEnum):
    MALE = "Male"
    FEMALE = "Female"


class PersonnelStatus(StrEnum):
    ACTIVE = "Active"
    RETIRED = "Retired"
    SUSPENDED = "Suspended"


def utcnow() -> datetime:
    return datetime.now(UTC)


class Record(BaseModel):
    """Any stored entity: a caller-assigned ``id`` unique in its collection."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        use_enum_values=False,
    )

    id: str = Field(min_length=1)

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


# Forms submit "" for untouched optional inputs
OptionalText = Annotated[str | None, BeforeValidator(_blank_to_none)]
OptionalDate = Annotated[date | None, BeforeValidator(_blank_to_none)]


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class _UserFields(Record):
    first_name: str
    last_name: str
    middle_name: OptionalText = None
    extension: OptionalText = None
    email: str
    role: Role = Role.ADMIN
    rank: Rank = Rank.JO1
    is_active: bool = True
    must_change_password: bool = False
    last_login: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    created_by: OptionalText = None

    @property
    def display_name(self) -> str:
        return display_name(self.first_name, self.last_name, self.middle_name)


class PublicUser(_UserFields):
    """User as shown to listing and UI consumers (no password)."""


class UserAccount(_UserFields):
    """User with credentials; internal to auth and the repository."""

    password: str = Field(default="", repr=False)

    def public(self) -> PublicUser:
        return PublicUser.model_validate(self.model_dump(exclude={"password"}))


# ---------------------------------------------------------------------------
# Personnel
# ---------------------------------------------------------------------------


class Personnel(Record):
    rank: Rank
    last_name: str
    first_name: str
    middle_name: OptionalText = None
    extension: OptionalText = None
    gender: Gender
    office_assignment: list[str] = Field(default_factory=list)
    designation: list[str] = Field(default_factory=list)
    education: str = ""
    eligibility: str = ""
    date_of_birth: date
    date_of_appointment: date
    date_of_last_promotion: OptionalDate = None
    training_type: OptionalText = None
    status: PersonnelStatus = PersonnelStatus.ACTIVE
    remarks: OptionalText = None  # e.g. "ON-MPDC-SCHOOLING(15/March/2025)"

    @property
    def display_name(self) -> str:
        return display_name(self.first_name, self.last_name, self.middle_name)

    @property
    def retirement_date(self) -> date:
        """Date of birth plus the mandatory retirement age."""
        dob = self.date_of_birth
        year = dob.year + RETIREMENT_AGE_YEARS
        try:
            return dob.replace(year=year)
        except ValueError:
            # Feb 29 in a non-leap target year
            return dob.replace(year=year, day=28)


# ---------------------------------------------------------------------------
# Audit log
# ---------------------------------------------------------------------------


class AuditLogEntry(Record):
    action: str
    details: str
    performed_by: str
    timestamp: datetime = Field(default_factory=utcnow)


def display_name(first: str, last: str, middle: str | None = None) -> str:
    """``first [middle ]last`` as used at the head of change summaries."""
    return f"{first} {middle + ' ' if middle else ''}{last}"
