"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database or Redis by accident
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.pop("REDIS_URL", None)
