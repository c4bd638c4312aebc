"""
admission_gate.admission

Request admission-control core.

Responsibilities:
- Role policy table (rate-limit tiers) and per-request rule construction.
- Security decision evaluation and normalization.
- Translation of decisions/failure signals into HTTP responses.
- The admission middleware that orders all of the above.
"""

# Package marker; import from submodules directly.


# --- Module Notes -----------------------------------------------------------
# Everything in this package except `middleware` and the `translator.reject*` renderers is free of
# HTTP framework types, so it can be tested without an ASGI app.
