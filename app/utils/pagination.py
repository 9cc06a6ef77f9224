from sqlalchemy import func
from sqlmodel import select

MAX_PAGE_SIZE = 100


def paginate(
    *,
    session,
    query,
    page: int = 1,
    limit: int = 10,
):
    """Run ``query`` for one page. Out-of-range page and limit values are clamped."""
    page = max(page, 1)
    limit = min(limit, MAX_PAGE_SIZE) if limit >= 1 else 10

    total = session.exec(
        select(func.count()).select_from(query.subquery())
    ).one()

    results = session.exec(
        query.offset((page - 1) * limit).limit(limit)
    ).all()

    total_pages = (total + limit - 1) // limit
    return {
        "total_items": total,
        "total_pages": total_pages,
        "current_page": page,
        "limit": limit,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
        "results": results,
    }
