# sitebuilder/utils/pagination.py
from typing import Any, List, Tuple

from flask import request
from werkzeug.exceptions import BadRequest

DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100


def pagination_args() -> Tuple[int, int]:
    """Read `page` / `per_page` from the query string."""
    try:
        page = int(request.args.get("page", 1))
        per_page = int(request.args.get("per_page", DEFAULT_PER_PAGE))
    except ValueError as exc:
        raise BadRequest("page and per_page must be integers") from exc

    if page < 1 or per_page < 1:
        raise BadRequest("page and per_page must be greater than zero")

    return page, min(per_page, MAX_PER_PAGE)


def paginate(query, *, page: int, per_page: int) -> Tuple[List[Any], int]:
    """Offset pagination over an already ordered query."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * per_page).limit(per_page).all()
    return items, total
