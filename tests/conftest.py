"""Test configuration.

Puts ``backend/`` on ``sys.path`` so ``ghbrowser`` imports without an
install, and provides a scripted in-memory data source.
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest


def _ensure_backend_on_path() -> None:
    backend = Path(__file__).resolve().parent.parent / "backend"
    if str(backend) not in sys.path:
        sys.path.insert(0, str(backend))


_ensure_backend_on_path()

from ghbrowser.config import Settings  # noqa: E402
from ghbrowser.schemas import RepositorySearchResult, RepositorySummary, UserProfile  # noqa: E402


def make_user(user_id: int, login: Optional[str] = None, **overrides: Any) -> UserProfile:
    login = login or f"user{user_id}"
    data = dict(
        id=user_id,
        login=login,
        avatar_url=f"https://avatars.example/{user_id}",
        name=f"User {user_id}",
        public_repos=3,
        followers=10,
        following=1,
        html_url=f"https://github.com/{login}",
        created_at="2020-01-01T00:00:00Z",
    )
    data.update(overrides)
    return UserProfile(**data)


def make_repo(repo_id: int, name: Optional[str] = None, **overrides: Any) -> RepositorySummary:
    name = name or f"repo{repo_id}"
    data = dict(
        id=repo_id,
        name=name,
        full_name=f"owner/{name}",
        description=None,
        language=None,
        stargazers_count=0,
        forks=0,
        html_url=f"https://github.com/owner/{name}",
        updated_at="2024-01-01T00:00:00Z",
    )
    data.update(overrides)
    return RepositorySummary(**data)


class FakeSource:
    """Scripted data source; values may be lists, results or exceptions to raise."""

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []
        self.user_search: Dict[Tuple[str, int], Any] = {}
        self.users: Dict[str, Any] = {}
        self.repo_pages: Dict[int, Any] = {}
        self.repo_search: Dict[int, Any] = {}
        self.details: Dict[Tuple[str, str], Any] = {}
        self.gates: Dict[Any, asyncio.Event] = {}

    async def _answer(self, gate_key: Any, value: Any) -> Any:
        gate = self.gates.get(gate_key)
        if gate is not None:
            await gate.wait()
        if isinstance(value, Exception):
            raise value
        return value

    async def search_users(self, query: str, page: int = 1) -> List[UserProfile]:
        self.calls.append(("search_users", query, page))
        return await self._answer(query, self.user_search.get((query, page), []))

    async def get_user(self, username: str) -> UserProfile:
        self.calls.append(("get_user", username))
        return await self._answer(username, self.users[username])

    async def get_repositories(self, username, sort=None, order=None, page=1):
        self.calls.append(("get_repositories", username, sort, order, page))
        return await self._answer(("repos", page), self.repo_pages.get(page, []))

    async def get_repository(self, owner: str, repo: str):
        self.calls.append(("get_repository", owner, repo))
        return await self._answer((owner, repo), self.details[(owner, repo)])

    async def search_repositories(self, query, sort=None, order=None, page=1):
        self.calls.append(("search_repositories", query, sort, order, page))
        default = RepositorySearchResult(repositories=[], total_count=0, has_more=False)
        return await self._answer(("search", page), self.repo_search.get(page, default))

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture()
def fake_source() -> FakeSource:
    return FakeSource()


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        CACHE_DIR=str(tmp_path / "cache"),
        DATA_DIR=str(tmp_path / "data"),
        SHARED_DIR=str(tmp_path / "shared"),
        GITHUB_TOKEN="",
        SEARCH_DEBOUNCE_SECONDS=0.05,
    )
