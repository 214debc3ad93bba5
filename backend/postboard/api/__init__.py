"""API Layer — FastAPI routes, middleware pipeline, validation and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses; every failure uses the error envelope

Design Decisions:
    - Thin routes delegate to services (ADR: impureim sandwich)
"""
