"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from api/ or services/
    - All external failures mapped to PostboardError subclasses or reported as health state

Design Decisions:
    - Thin owned wrappers over raw clients (ADR: single responsibility)
"""
