from typing import Any, Generic, List, Type, TypeVar

from loguru import logger
from pydantic import ValidationError

from ..codec import type_adapter
from ..schemas import RepositorySummary, UserProfile
from .observable import Observable
from .storage import KeyValueStore

E = TypeVar("E", UserProfile, RepositorySummary)

FAVORITE_USERS_KEY = "favoriteUsers"
FAVORITE_REPOSITORIES_KEY = "favoriteRepositories"


class FavoritesStore(Generic[E]):
    """Ordered favorites, unique by ``id``. Each change is saved, then published."""

    def __init__(self, store: KeyValueStore, key: str, kind: Type[E]):
        self._store = store
        self._key = key
        self._adapter = type_adapter(List[kind])
        self.favorites: Observable[List[E]] = Observable(self._load())

    def _load(self) -> List[E]:
        raw = self._store.read(self._key)
        if raw is None:
            return []
        try:
            return self._adapter.validate_python(raw)
        except ValidationError as exc:
            logger.warning(f"Discarding unreadable {self._key}: {exc.error_count()} errors")
            return []

    def _save(self, items: List[E]) -> None:
        self._store.write(self._key, self._adapter.dump_python(items, mode="json", by_alias=True))
        self.favorites.set(items)

    def all(self) -> List[E]:
        return list(self.favorites.value)

    def is_favorite(self, item: E) -> bool:
        return self.contains_id(item.id)

    def contains_id(self, item_id: int) -> bool:
        return any(fav.id == item_id for fav in self.favorites.value)

    def add(self, item: E) -> None:
        if self.is_favorite(item):
            return
        self._save([*self.favorites.value, item])

    def remove(self, item: E) -> None:
        self.remove_id(item.id)

    def remove_id(self, item_id: Any) -> None:
        if not self.contains_id(item_id):
            return
        self._save([fav for fav in self.favorites.value if fav.id != item_id])


def favorite_users(store: KeyValueStore) -> FavoritesStore[UserProfile]:
    return FavoritesStore(store, FAVORITE_USERS_KEY, UserProfile)


def favorite_repositories(store: KeyValueStore) -> FavoritesStore[RepositorySummary]:
    return FavoritesStore(store, FAVORITE_REPOSITORIES_KEY, RepositorySummary)
