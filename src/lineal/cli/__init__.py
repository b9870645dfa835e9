"""
lineal.cli — Click-based CLI entry point and command handlers.

Commands:
    init        Bootstrap default accounts and starter personnel
    passwd      Rotate a forced password or change your own
    personnel   List, save, and delete personnel records
    users       Manage administrative accounts
    logs        Show, search, and clear the audit log
    config      Show and validate configuration
    db          Storage inspection
    version     Show version information
"""
