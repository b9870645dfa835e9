"""
Lineal test suite.

    tests/unit/         Models, storage, audit, auth, seed, and config (no CLI)
    tests/integration/  CLI commands end to end against sqlite and file stores
"""
