from typing import List, Optional, Protocol

from ..schemas import (
    RepositoryDetail,
    RepositoryOrder,
    RepositorySearchResult,
    RepositorySort,
    RepositorySummary,
    UserProfile,
)


class DataSource(Protocol):
    async def search_users(self, query: str, page: int = 1) -> List[UserProfile]:
        ...

    async def get_user(self, username: str) -> UserProfile:
        ...

    async def get_repositories(
        self,
        username: str,
        sort: Optional[RepositorySort] = None,
        order: Optional[RepositoryOrder] = None,
        page: int = 1,
    ) -> List[RepositorySummary]:
        ...

    async def get_repository(self, owner: str, repo: str) -> RepositoryDetail:
        ...

    async def search_repositories(
        self,
        query: str,
        sort: Optional[RepositorySort] = None,
        order: Optional[RepositoryOrder] = None,
        page: int = 1,
    ) -> RepositorySearchResult:
        ...
