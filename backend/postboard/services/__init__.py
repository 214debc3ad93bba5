"""Services — persistence orchestration for the route handlers.

Invariants:
    - Services never build HTTP responses; they return ORM objects or raise PostboardError
    - Every successful mutation is logged at INFO with the affected entity id
"""
