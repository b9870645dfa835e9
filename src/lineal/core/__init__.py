"""
lineal.core — storage, audit, authentication, and shared infrastructure.

Modules:
    store       Persistence backends and the generic collection repository
    audit       Diff engine and the bounded audit log
    auth        Password policy and the login / forced-rotation flow
    models      Typed records: UserAccount, PublicUser, Personnel, AuditLogEntry
    access      Role-to-permission table
    roster      Audited, role-gated operations used by the UI layer
    seed        Bootstrap of the default accounts and starter personnel
    config      Configuration loading (TOML + env vars)
    logging     stdlib logging configuration
    exceptions  Lineal-specific exception hierarchy
    constants   Exit codes, storage keys, defaults
"""
