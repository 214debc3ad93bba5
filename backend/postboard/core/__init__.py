"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions only build values; the clock is the one ambient input (timestamps)

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
