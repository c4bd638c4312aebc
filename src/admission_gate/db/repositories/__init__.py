"""
admission_gate.db.repositories

Repository package.

Responsibilities:
- Group data-access repositories for users and sessions.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Repositories are intentionally thin; commit boundaries belong to callers.
