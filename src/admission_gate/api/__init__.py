"""
admission_gate.api

API package for the Admission Gate service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and request/response models.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Admission (session hydration + security evaluation) happens in middleware before any
# router runs; routers only add role gates on top.
