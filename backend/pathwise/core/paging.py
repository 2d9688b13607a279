from collections.abc import Callable
from typing import NamedTuple, TypeVar

from sqlalchemy.orm import Query

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 200


class PageSlice(NamedTuple):
    items: list
    total: int
    page: int
    page_size: int


def paginate_query(
    query: Query,
    *,
    page: int,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: int = MAX_PAGE_SIZE,
) -> PageSlice:
    safe_page = max(1, page)
    safe_page_size = max(1, min(page_size, max_page_size))
    total = query.count()
    items = query.offset((safe_page - 1) * safe_page_size).limit(safe_page_size).all()
    return PageSlice(items, total, safe_page, safe_page_size)


def list_or_page(
    query: Query,
    *,
    page: int | None,
    page_size: int,
    serializer: Callable[[T], dict],
) -> tuple[list[dict], dict]:
    """Serialize a whole query, or one page of it when ``page`` is given.

    Returns ``(items, meta)``; ``meta`` is empty for unpaged results.
    """
    if page is None:
        return [serializer(item) for item in query.all()], {}
    sliced = paginate_query(query, page=page, page_size=page_size)
    meta = {"total": sliced.total, "page": sliced.page, "page_size": sliced.page_size}
    return [serializer(item) for item in sliced.items], meta
