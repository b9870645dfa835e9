"""
Lineal — role-gated personnel roster with a diff-based audit trail.

Lineal keeps the personnel lineal list and the administrative accounts
allowed to edit it. Every change to a tracked record is written to the
audit log as a human-readable summary of what changed, and accounts are
protected by a password-complexity policy with forced rotation.

Package layout (src/lineal/):
  core/store/  — persistence backends and the collection repository
  core/audit/  — field-level diff engine and the audit log service
  core/auth/   — password policy and the login/rotation state machine
  core/        — config, constants, exceptions, logging, seeding, roster
  cli/         — Click CLI entry point
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
