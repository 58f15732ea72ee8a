"""Builds the process-wide services once and hands them to whoever needs them."""

from dataclasses import dataclass
from typing import Optional

from .config import Settings
from .controllers.detail import RepositoryDetailController, UserDetailController
from .controllers.repository_list import RepositoryListController
from .controllers.repository_search import RepositorySearchController
from .controllers.user_search import UserSearchController
from .datasources.github_adapter import GitHubAdapter
from .datasources.transport import HttpTransport
from .repositories.repos import ReposRepository
from .repositories.users import UsersRepository
from .schemas import RepositorySummary, UserProfile
from .services.cache import CacheStore
from .services.connectivity import ConnectivityMonitor
from .services.favorites import FavoritesStore, favorite_repositories, favorite_users
from .services.history import SearchHistory
from .services.storage import JsonFileStore, KeyValueStore, MirroredStore, ReloadMarker


@dataclass
class AppContainer:
    settings: Settings
    transport: HttpTransport
    cache: CacheStore
    users: UsersRepository
    repos: ReposRepository
    favorite_users: FavoritesStore[UserProfile]
    favorite_repositories: FavoritesStore[RepositorySummary]
    history: SearchHistory
    connectivity: ConnectivityMonitor

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[HttpTransport] = None) -> "AppContainer":
        transport = transport or HttpTransport(settings)
        source = GitHubAdapter(transport, settings)
        cache = CacheStore.from_settings(settings)
        interval = settings.revalidate_min_interval_seconds

        private_store = JsonFileStore(settings.data_dir / "preferences.json")
        user_favorites_store: KeyValueStore = private_store
        if settings.shared_dir is not None:
            user_favorites_store = MirroredStore(
                private_store,
                JsonFileStore(settings.shared_dir / "shared.json"),
                notify=ReloadMarker(settings.shared_dir / "reload.json"),
            )

        return cls(
            settings=settings,
            transport=transport,
            cache=cache,
            users=UsersRepository(source, cache, revalidate_min_interval=interval),
            repos=ReposRepository(source, cache, revalidate_min_interval=interval),
            favorite_users=favorite_users(user_favorites_store),
            favorite_repositories=favorite_repositories(private_store),
            history=SearchHistory(private_store, limit=settings.history_limit),
            connectivity=ConnectivityMonitor(transport.client),
        )

    def user_search(self) -> UserSearchController:
        return UserSearchController(
            self.users,
            self.favorite_users,
            self.history,
            page_size=self.settings.per_page,
            debounce_seconds=self.settings.search_debounce_seconds,
        )

    def repository_list(self, username: str) -> RepositoryListController:
        return RepositoryListController(username, self.repos, page_size=self.settings.per_page)

    def repository_search(self) -> RepositorySearchController:
        return RepositorySearchController(self.repos, debounce_seconds=self.settings.search_debounce_seconds)

    def user_detail(self, username: str) -> UserDetailController:
        return UserDetailController(username, self.users, self.favorite_users)

    def repository_detail(self, owner: str, repo: str) -> RepositoryDetailController:
        return RepositoryDetailController(owner, repo, self.repos)

    async def aclose(self) -> None:
        await self.users.wait_background()
        await self.repos.wait_background()
        await self.transport.aclose()
