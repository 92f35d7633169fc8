"""Search service interfaces."""

from .service import MessageSearchFilters, MessageSearchService

__all__ = [
    "MessageSearchFilters",
    "MessageSearchService",
]
