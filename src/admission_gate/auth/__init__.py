"""
admission_gate.auth

Authentication/authorization package.

Responsibilities:
- Identity model and role set.
- Signed session-cookie helpers and password hashing.
- Session identity resolution and the role authorization gate.
- FastAPI auth dependencies (Identity + RBAC).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing here talks to the database directly; session records are loaded by
# `sessions.store` and handed to the resolver.
