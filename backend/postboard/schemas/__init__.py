"""Pydantic Schemas — request validation rule sets and response shapes.

Invariants:
    - Input schemas validate at the system boundary via api/validation.validate()
    - Output schemas serialize ORM objects with camelCase keys

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence (ADR: DDD boundary)
"""
