"""
admission_gate.api.routers

HTTP routers (health, landing, auth, users).
"""

# Package marker.
