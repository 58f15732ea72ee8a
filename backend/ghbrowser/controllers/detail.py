from typing import List, Optional

from ..errors import AppError
from ..repositories.repos import ReposRepository
from ..repositories.users import UsersRepository
from ..schemas import RepositoryDetail, UserProfile
from ..services.favorites import FavoritesStore
from ..services.observable import Observable
from .state import LoadingState


class UserDetailController:
    def __init__(self, username: str, repository: UsersRepository, favorites: FavoritesStore[UserProfile]):
        self.username = username
        self.repository = repository
        self.favorites = favorites

        self.user: Observable[Optional[UserProfile]] = Observable(None)
        self.state: Observable[LoadingState] = Observable(LoadingState.idle())
        self.is_favorite: Observable[bool] = Observable(False)
        self._unsubscribe = favorites.favorites.subscribe(self._sync_favorite, emit_current=False)

    def _sync_favorite(self, favorites: List[UserProfile]) -> None:
        user = self.user.value
        self.is_favorite.set(user is not None and any(f.id == user.id for f in favorites))

    async def load(self) -> None:
        self.state.set(LoadingState.loading())
        try:
            user = await self.repository.get_user(self.username)
        except AppError as exc:
            self.state.set(LoadingState.error(exc.message))
            return
        self.user.set(user)
        self.is_favorite.set(self.favorites.is_favorite(user))
        self.state.set(LoadingState.loaded())

    def toggle_favorite(self) -> None:
        user = self.user.value
        if user is None:
            return
        if self.is_favorite.value:
            self.favorites.remove(user)
        else:
            self.favorites.add(user)

    def close(self) -> None:
        self._unsubscribe()


class RepositoryDetailController:
    def __init__(self, owner: str, repo: str, repository: ReposRepository):
        self.owner = owner
        self.repo = repo
        self.repository = repository
        self.detail: Observable[Optional[RepositoryDetail]] = Observable(None)
        self.state: Observable[LoadingState] = Observable(LoadingState.idle())

    async def load(self) -> None:
        self.state.set(LoadingState.loading())
        try:
            detail = await self.repository.get_repository(self.owner, self.repo)
        except AppError as exc:
            self.state.set(LoadingState.error(exc.message))
            return
        self.detail.set(detail)
        self.state.set(LoadingState.loaded())

    @staticmethod
    def format_size(size_kb: int) -> str:
        """Human readable size for the API's ``size`` field (KB), decimal units."""
        size = size_kb * 1024
        if size < 1000 * 1000:
            return f"{max(round(size / 1000), 1 if size else 0)} KB"
        return f"{size / (1000 * 1000):.1f} MB"
