from typing import List

from ..schemas import UserProfile
from .base import CachedRepository
from .cache_keys import user_key, user_search_key


class UsersRepository(CachedRepository):
    async def search_users(self, query: str, page: int = 1) -> List[UserProfile]:
        key = user_search_key(query) if page == 1 and query.strip() else None
        return await self._read_through(
            key,
            List[UserProfile],
            lambda: self.source.search_users(query, page=page),
        )

    async def get_user(self, username: str) -> UserProfile:
        key = user_key(username) if username.strip() else None
        return await self._read_through(key, UserProfile, lambda: self.source.get_user(username))
