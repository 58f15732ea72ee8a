"""Deterministic cache keys.

Every logical parameter is part of the key, so a new filter combination
produces a new entry instead of overwriting an old one.
"""

from typing import Optional

from ..schemas import RepositoryOrder, RepositorySort


def user_key(username: str) -> str:
    return f"user_{username.strip()}"


def user_search_key(query: str) -> str:
    return f"search_{query.strip()}_page1"


def repositories_key(
    username: str,
    sort: Optional[RepositorySort] = None,
    order: Optional[RepositoryOrder] = None,
) -> str:
    sort_part = sort.value if sort else "default"
    order_part = order.value if order else "default"
    return f"repos_{username.strip()}_{sort_part}_{order_part}_page1"
