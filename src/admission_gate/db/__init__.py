"""
admission_gate.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories for users and sessions.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The admission core only sees persistence through `sessions.store.SessionStore`.
