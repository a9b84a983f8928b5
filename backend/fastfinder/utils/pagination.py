"""
Pagination Utility Module

Offset pagination over a SQLAlchemy select, shared by the item listings.
"""
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    count_query: Optional[Select] = None
) -> dict:
    """
    Apply pagination to a SQLAlchemy query.

    Args:
        db: Database session
        query: Base query, already filtered and ordered
        page: Page number (1-indexed)
        page_size: Items per page, capped at MAX_PAGE_SIZE
        count_query: Optional custom count query

    Returns:
        Dictionary with items, total, page, page_size, total_pages, has_next, has_previous
    """
    page = max(1, page)
    page_size = max(1, min(MAX_PAGE_SIZE, page_size))
    offset = (page - 1) * page_size

    if count_query is None:
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0
    total_pages = (total + page_size - 1) // page_size if total > 0 else 1

    result = await db.execute(query.offset(offset).limit(page_size))
    items = result.scalars().all()

    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_previous": page > 1
    }


def pagination_meta(page_info: dict) -> dict:
    """camelCase pagination fields for the response envelope"""
    return {
        "total": page_info["total"],
        "page": page_info["page"],
        "pageSize": page_info["page_size"],
        "totalPages": page_info["total_pages"],
        "hasNext": page_info["has_next"],
        "hasPrevious": page_info["has_previous"],
    }
