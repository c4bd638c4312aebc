"""
admission_gate.sessions

Server-side session storage.

Responsibilities:
- The session-store collaborator used by the admission chain and auth routes.
"""

# Package marker.
