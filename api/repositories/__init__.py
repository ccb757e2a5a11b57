"""Repository layer for database operations.

Repositories encapsulate all database queries, keeping services free of SQL
and routes focused on HTTP handling.
"""

from repositories.iou_repository import IOURepository
from repositories.utils import log_slow_query

__all__ = [
    "IOURepository",
    "log_slow_query",
]
