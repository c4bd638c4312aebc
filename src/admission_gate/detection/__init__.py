"""
admission_gate.detection

Threat-detection capability boundary.

Responsibilities:
- Immutable request snapshot handed to the capability.
- The `ThreatDetector` protocol the evaluator depends on.
- An in-process reference implementation (`LocalThreatDetector`).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# A hosted vendor client can replace `LocalThreatDetector` by implementing the same
# protocol; the evaluator never imports a concrete detector.
