from typing import List, Optional, Sequence

from ..schemas import RepositoryOrder, RepositorySort, RepositorySummary


def _matches_text(repo: RepositorySummary, needle: str) -> bool:
    if needle in repo.name.casefold():
        return True
    return repo.description is not None and needle in repo.description.casefold()


def sort_repositories(
    repos: Sequence[RepositorySummary],
    sort: RepositorySort,
    order: RepositoryOrder,
) -> List[RepositorySummary]:
    result = list(repos)
    if sort == RepositorySort.stars:
        result.sort(key=lambda r: r.stars, reverse=True)
    elif sort == RepositorySort.full_name:
        result.sort(key=lambda r: r.full_name)
    elif sort == RepositorySort.updated:
        result.sort(key=lambda r: r.updated_at, reverse=True)
    # created / pushed: keep the order the API returned

    if order == RepositoryOrder.asc:
        result.reverse()
    return result


def apply_filters(
    repos: Sequence[RepositorySummary],
    text: str = "",
    language: Optional[str] = None,
    sort: RepositorySort = RepositorySort.updated,
    order: RepositoryOrder = RepositoryOrder.desc,
) -> List[RepositorySummary]:
    """Derive the visible list from the fetched one. Pure; the input is not modified."""
    filtered = list(repos)
    if text:
        needle = text.casefold()
        filtered = [r for r in filtered if _matches_text(r, needle)]
    if language is not None:
        filtered = [r for r in filtered if r.language == language]
    return sort_repositories(filtered, sort, order)
