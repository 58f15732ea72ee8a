from typing import List, Optional

from ..schemas import (
    RepositoryDetail,
    RepositoryOrder,
    RepositorySearchResult,
    RepositorySort,
    RepositorySummary,
)
from .base import CachedRepository
from .cache_keys import repositories_key


class ReposRepository(CachedRepository):
    async def get_repositories(
        self,
        username: str,
        sort: Optional[RepositorySort] = None,
        order: Optional[RepositoryOrder] = None,
        page: int = 1,
    ) -> List[RepositorySummary]:
        # only the first page is cache-eligible
        key = repositories_key(username, sort, order) if page == 1 and username.strip() else None
        return await self._read_through(
            key,
            List[RepositorySummary],
            lambda: self.source.get_repositories(username, sort=sort, order=order, page=page),
        )

    async def get_repository(self, owner: str, repo: str) -> RepositoryDetail:
        return await self.source.get_repository(owner, repo)

    async def search_repositories(
        self,
        query: str,
        sort: Optional[RepositorySort] = None,
        order: Optional[RepositoryOrder] = None,
        page: int = 1,
    ) -> RepositorySearchResult:
        return await self.source.search_repositories(query, sort=sort, order=order, page=page)
