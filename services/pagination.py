"""
Pagination helpers shared by the file and row listings.
"""

from typing import Any, Dict, Optional, Union

# Largest OFFSET the databases accept (signed 64-bit)
MAX_OFFSET = 2 ** 63 - 1


def parse_positive_int(value: Optional[Union[str, int]], default: int,
                       maximum: Optional[int] = None) -> int:
    """
    Parse a page/limit query value.

    Absent, non-numeric or non-positive values fall back to ``default``;
    the result is clamped to ``maximum`` when given.
    """
    try:
        number = int(str(value).strip()) if value is not None else default
    except ValueError:
        number = default

    if number < 1:
        number = default

    if maximum is not None:
        number = min(number, maximum)

    return number


def max_page_for(page_size: int) -> int:
    """Highest page number whose offset still fits in a database integer."""
    return MAX_OFFSET // page_size


def page_metadata(page: int, page_size: int, total: int) -> Dict[str, Any]:
    """Compute page counts and navigation flags."""
    total_pages = (total + page_size - 1) // page_size  # Ceiling division

    return {
        'current_page': page,
        'total_pages': total_pages,
        'has_next_page': page < total_pages,
        'has_prev_page': page > 1,
    }


def offset_for(page: int, page_size: int) -> int:
    return (page - 1) * page_size
