"""
Diff engine — human-readable change summaries for audit entries.

Each entity declares its comparable fields once, in display order, as a
table of :class:`FieldSpec`. Comparing two versions walks that table,
normalizes both sides to display strings, and emits one fragment per
field that differs::

    Juan Dela Cruz | Rank: "JO1" → "JO2" | Office Assignment: "A" → "A, B"

Output is deterministic for a given pair of records, so the audit log
can be read and diffed by people.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from lineal.core.models import Personnel, PublicUser, UserAccount

ARROW = "→"
FRAGMENT_SEPARATOR = " | "
LIST_JOINER = ", "
NO_CHANGES = "No specific changes detected"
PASSWORD_UPDATED = "Password: (Updated)"


@dataclass(frozen=True)
class FieldSpec:
    """One comparable field: display label and how to read it."""

    label: str
    extract: Callable[[Any], Any]

    def render(self, record: Any) -> str:
        return normalize(self.extract(record))


def normalize(value: Any) -> str:
    """Display string for a field value; absent and empty both become ""."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return LIST_JOINER.join(normalize(v) for v in value)
    return str(value)


def fragment(label: str, old: str, new: str) -> str:
    return f'{label}: "{old}" {ARROW} "{new}"'


def _attr(name: str) -> Callable[[Any], Any]:
    return lambda record: getattr(record, name)


PERSONNEL_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("Rank", _attr("rank")),
    FieldSpec("Last Name", _attr("last_name")),
    FieldSpec("First Name", _attr("first_name")),
    FieldSpec("Middle Name", _attr("middle_name")),
    FieldSpec("Extension", _attr("extension")),
    FieldSpec("Gender", _attr("gender")),
    FieldSpec("Office Assignment", _attr("office_assignment")),
    FieldSpec("Designation", _attr("designation")),
    FieldSpec("Education", _attr("education")),
    FieldSpec("Eligibility", _attr("eligibility")),
    FieldSpec("Date of Birth", _attr("date_of_birth")),
    FieldSpec("Date of Appointment", _attr("date_of_appointment")),
    FieldSpec("Date Last Promotion", _attr("date_of_last_promotion")),
    FieldSpec("Training", _attr("training_type")),
    FieldSpec("Status", _attr("status")),
    FieldSpec("Remarks", _attr("remarks")),
)

USER_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("Rank", _attr("rank")),
    FieldSpec("First Name", _attr("first_name")),
    FieldSpec("Last Name", _attr("last_name")),
    FieldSpec("Email", _attr("email")),
    FieldSpec("Role", _attr("role")),
    FieldSpec("Active Status", _attr("is_active")),
)


def changed_fragments(old: Any, new: Any, fields: Sequence[FieldSpec]) -> list[str]:
    """Fragments for every field in *fields* whose display value differs."""
    changes: list[str] = []
    for spec in fields:
        o, n = spec.render(old), spec.render(new)
        if o != n:
            changes.append(fragment(spec.label, o, n))
    return changes


def created_summary(record: Personnel | UserAccount | PublicUser) -> str:
    if isinstance(record, Personnel):
        return f"Added New Personnel: {record.rank.value} {record.last_name}, {record.first_name}"
    return f"Created new user: {record.rank.value} {record.last_name} ({record.email})"


def deleted_summary(record: Personnel | UserAccount | PublicUser) -> str:
    if isinstance(record, Personnel):
        return f"Deleted Personnel: {record.rank.value} {record.last_name}, {record.first_name}"
    return f"Deleted User: {record.rank.value} {record.last_name} ({record.email})"


def diff(
    old: Any | None,
    new: Any,
    fields: Sequence[FieldSpec],
    *,
    extra: Sequence[str] = (),
) -> str:
    """
    Summarize the change from *old* to *new*.

    A missing *old* yields the creation summary with no per-field diff.
    Otherwise the result is ``<display name> | <fragment> | ...``, where
    the display name is taken from *old*, followed by any *extra*
    fragments; with nothing changed the fragments are replaced by
    ``No specific changes detected``.
    """
    if old is None:
        return created_summary(new)

    changes = changed_fragments(old, new, fields)
    changes.extend(extra)
    body = FRAGMENT_SEPARATOR.join(changes) if changes else NO_CHANGES
    return f"{old.display_name}{FRAGMENT_SEPARATOR}{body}"


def diff_personnel(old: Personnel | None, new: Personnel) -> str:
    return diff(old, new, PERSONNEL_FIELDS)


def diff_user(
    old: UserAccount | PublicUser | None,
    new: UserAccount | PublicUser,
    *,
    password_changed: bool = False,
) -> str:
    """User summary; the password is only ever reported as updated."""
    extra = (PASSWORD_UPDATED,) if password_changed else ()
    return diff(old, new, USER_FIELDS, extra=extra)
