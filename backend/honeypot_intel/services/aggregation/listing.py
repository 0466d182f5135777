# backend/honeypot_intel/services/aggregation/listing.py
from typing import List

from honeypot_intel.schemas.aggregates import PaginatedResponse
from honeypot_intel.schemas.events import Event


def paginate(events: List[Event], page: int, page_size: int) -> PaginatedResponse[Event]:
    """Zero-based page of an already sorted (newest first) event list."""
    page = max(page, 0)
    page_size = max(page_size, 1)
    start = page * page_size
    return PaginatedResponse[Event](
        rows=events[start:start + page_size],
        total=len(events),
        page=page,
        page_size=page_size,
    )
