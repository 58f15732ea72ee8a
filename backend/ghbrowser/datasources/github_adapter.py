import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from loguru import logger

from ..config import Settings, get_settings
from ..errors import AppError, NetworkError
from ..schemas import (
    RepositoryDetail,
    RepositoryOrder,
    RepositorySearchResponse,
    RepositorySearchResult,
    RepositorySort,
    RepositorySummary,
    UserProfile,
    UserSearchResponse,
)
from .base import DataSource
from .transport import HttpTransport

# 1-39 chars, alphanumerics and hyphens, no hyphen at either end
_USERNAME_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,37}[A-Za-z0-9])?$")


def is_valid_username(value: str) -> bool:
    return bool(_USERNAME_RE.match(value))


def _segment(value: str) -> str:
    return quote(value, safe="")


class GitHubAdapter(DataSource):
    def __init__(self, transport: Optional[HttpTransport] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.transport = transport or HttpTransport(self.settings)

    @property
    def per_page(self) -> int:
        return self.settings.per_page

    def _page_params(self, page: int) -> Dict[str, Any]:
        return {"per_page": self.per_page, "page": page}

    async def search_users(self, query: str, page: int = 1) -> List[UserProfile]:
        clean = query.strip()
        if not clean:
            return []

        # exact handle first: saves a round trip and yields the full profile
        if is_valid_username(clean):
            try:
                return [await self.get_user(clean)]
            except AppError as exc:
                logger.debug(f"Direct lookup for {clean!r} failed ({exc.message}), using search")

        params = {"q": f"{clean} type:user", **self._page_params(page)}
        response = await self.transport.fetch("/search/users", UserSearchResponse, params=params)
        return [stub.to_profile() for stub in response.items]

    async def get_user(self, username: str) -> UserProfile:
        clean = username.strip()
        if not clean:
            raise NetworkError("Username cannot be empty")
        return await self.transport.fetch(f"/users/{_segment(clean)}", UserProfile)

    async def get_repositories(
        self,
        username: str,
        sort: Optional[RepositorySort] = None,
        order: Optional[RepositoryOrder] = None,
        page: int = 1,
    ) -> List[RepositorySummary]:
        clean = username.strip()
        if not clean:
            raise NetworkError("Username cannot be empty")

        params: Dict[str, Any] = {}
        if sort:
            params["sort"] = sort.value
        if order:
            params["direction"] = order.value
        params.update(self._page_params(page))
        return await self.transport.fetch(
            f"/users/{_segment(clean)}/repos", List[RepositorySummary], params=params
        )

    async def get_repository(self, owner: str, repo: str) -> RepositoryDetail:
        clean_owner = owner.strip()
        clean_repo = repo.strip()
        if not clean_owner or not clean_repo:
            raise NetworkError("Owner and repo names cannot be empty")
        return await self.transport.fetch(
            f"/repos/{_segment(clean_owner)}/{_segment(clean_repo)}", RepositoryDetail
        )

    async def search_repositories(
        self,
        query: str,
        sort: Optional[RepositorySort] = None,
        order: Optional[RepositoryOrder] = None,
        page: int = 1,
    ) -> RepositorySearchResult:
        clean = query.strip()
        if not clean:
            return RepositorySearchResult(repositories=[], total_count=0, has_more=False)

        params: Dict[str, Any] = {"q": clean, **self._page_params(page)}
        if sort:
            params["sort"] = sort.value
        if order:
            params["order"] = order.value
        response = await self.transport.fetch(
            "/search/repositories", RepositorySearchResponse, params=params
        )
        return RepositorySearchResult(
            repositories=response.items,
            total_count=response.total_count,
            has_more=page * self.per_page < response.total_count,
        )
