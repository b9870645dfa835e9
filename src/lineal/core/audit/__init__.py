"""
lineal.core.audit — change summaries and the audit log.

Modules:
    diff    Field tables and the diff engine producing change summaries
    log     AuditLog: newest-first, bounded, searchable, clearable
"""

from lineal.core.audit.diff import (
    PERSONNEL_FIELDS,
    USER_FIELDS,
    FieldSpec,
    diff,
    diff_personnel,
    diff_user,
)
from lineal.core.audit.log import AuditAction, AuditLog

__all__ = [
    "PERSONNEL_FIELDS",
    "USER_FIELDS",
    "AuditAction",
    "AuditLog",
    "FieldSpec",
    "diff",
    "diff_personnel",
    "diff_user",
]
