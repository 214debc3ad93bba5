"""Pagination — pure normalization of page/limit query parameters.

Invariants:
    - page >= 1 and 1 <= limit <= MAX_LIMIT after normalization
    - offset = (page - 1) * limit
    - pages = ceil(total / limit); zero rows means zero pages

Design Decisions:
    - Normalize instead of reject: out-of-range numbers fall back to sane values,
      only non-integers are rejected (at the FastAPI query layer)
"""

import math
from dataclasses import dataclass

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def normalize_page_request(page: int, limit: int) -> PageRequest:
    """Clamp raw query values into a valid PageRequest."""
    if page < 1:
        page = 1
    if limit < 1:
        limit = DEFAULT_LIMIT
    return PageRequest(page=page, limit=min(limit, MAX_LIMIT))


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit)


def pagination_summary(request: PageRequest, total: int) -> dict:
    """Build the {page, limit, total, pages} block of a list response."""
    return {
        "page": request.page,
        "limit": request.limit,
        "total": total,
        "pages": page_count(total, request.limit),
    }
