"""
FlagArchive Backend: Page Parameters
====================================

Shared by every listing service: zero-based page index, clamped page size,
and the row offset handed to a repository's list_page().
"""

from typing import Optional, Tuple

from flagarchive.config import settings
from flagarchive.database import MAX_ID
from flagarchive.exceptions import BadInputError
from flagarchive.services.validator import FieldViolation

# A table never holds more rows than there are ids, so every page starting at
# or beyond this offset is empty. Capping here keeps the bound parameter small
# enough for any driver.
MAX_OFFSET = MAX_ID


def resolve_page(page: int, size: Optional[int]) -> Tuple[int, int]:
    """
    Check a zero-based page index and clamp the page size.

    A missing size means the default; a size above the maximum is cut down
    to it rather than rejected. A page past the end is valid and simply empty.
    """
    violations = []
    if page < 0:
        violations.append(FieldViolation("page", "must be zero or greater"))
    if size is None:
        size = settings.default_page_size
    elif size < 1:
        violations.append(FieldViolation("size", "must be at least 1"))
    if violations:
        raise BadInputError(
            message="Invalid pagination parameters",
            violations=[v.as_dict() for v in violations],
        )
    return page, min(size, settings.max_page_size)


def page_offset(page: int, size: int) -> int:
    return min(page * size, MAX_OFFSET)


def has_more(page: int, size: int, total_count: int) -> bool:
    return (page + 1) * size < total_count
