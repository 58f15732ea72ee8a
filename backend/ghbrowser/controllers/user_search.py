import asyncio
from typing import List, Optional

from loguru import logger

from ..errors import AppError
from ..repositories.users import UsersRepository
from ..schemas import UserProfile
from ..services.debounce import CancellationToken, Debouncer
from ..services.favorites import FavoritesStore
from ..services.history import SearchHistory
from ..services.observable import Observable
from .state import LoadingState, LoadStatus, PageCursor


class UserSearchController:
    """Debounced, single-flight user search with pagination and history.

    Typing goes through ``set_search_text``; only the text present when the
    debounce timer fires is searched. Starting a search cancels the previous
    one, and a cancelled search never publishes.
    """

    def __init__(
        self,
        repository: UsersRepository,
        favorites: FavoritesStore[UserProfile],
        history: SearchHistory,
        page_size: int = 30,
        debounce_seconds: float = 0.5,
    ):
        self.repository = repository
        self.favorites = favorites
        self.history = history
        self.page_size = page_size

        self.users: Observable[List[UserProfile]] = Observable([])
        self.state: Observable[LoadingState] = Observable(LoadingState.idle())
        self.is_refreshing: Observable[bool] = Observable(False)
        self.show_history: Observable[bool] = Observable(True)
        self.cursor = PageCursor()

        self.search_text = ""
        self._query = ""
        self._token = CancellationToken()
        self._task: Optional[asyncio.Task] = None
        self._debouncer: Debouncer[str] = Debouncer(debounce_seconds, self.search)

    @property
    def search_history(self) -> Observable[List[str]]:
        return self.history.history

    def set_search_text(self, text: str) -> None:
        self.search_text = text
        self.show_history.set(not text)
        if not text.strip():
            # clearing the field resets at once, no debounce and no network
            self._debouncer.cancel(forget=True)
            self.search(text)
            return
        self._debouncer.push(text)

    def search(self, query: str) -> None:
        self._token.cancel()

        if not query.strip():
            self._query = ""
            self.cursor.reset()
            self.users.set([])
            self.state.set(LoadingState.idle())
            return

        self._query = query
        self.cursor.reset()
        self.state.set(LoadingState.loading())
        token = CancellationToken()
        self._token = token
        self._task = asyncio.create_task(self._run_search(query, token))

    async def _run_search(self, query: str, token: CancellationToken) -> None:
        try:
            found = await self.repository.search_users(query, page=1)
        except AppError as exc:
            if token.cancelled:
                return
            self.users.set([])
            self.state.set(LoadingState.error(exc.message))
            return

        if token.cancelled:
            logger.debug(f"Dropping superseded results for {query!r}")
            return
        self.users.set(found)
        self.cursor.has_more = len(found) >= self.page_size
        self.state.set(LoadingState.loaded())
        if found:
            self.history.add(query)

    async def wait(self) -> None:
        """Wait for the pending debounce timer and the running search, if any."""
        while True:
            if self._debouncer.pending:
                await self._debouncer.wait()
            elif self._task is not None and not self._task.done():
                await asyncio.gather(self._task, return_exceptions=True)
            else:
                return

    async def load_next_page(self) -> None:
        if not self._query or self.state.value.status != LoadStatus.loaded:
            return
        page = self.cursor.begin_next()
        if page is None:
            return

        token = self._token
        try:
            more = await self.repository.search_users(self._query, page=page)
        except AppError as exc:
            if not token.cancelled:
                logger.debug(f"Page {page} failed, rolling back: {exc.message}")
                self.cursor.rollback()
            return

        if token.cancelled:
            return
        if more:
            self.users.set([*self.users.value, *more])
        self.cursor.finish_next(len(more), self.page_size)

    async def refresh(self) -> None:
        query = self.search_text
        if not query.strip():
            return
        self._debouncer.cancel()
        self._token.cancel()
        token = CancellationToken()
        self._token = token
        self._query = query
        self.cursor.reset()
        self.is_refreshing.set(True)
        self.state.set(LoadingState.loading())
        try:
            found = await self.repository.search_users(query, page=1)
        except AppError as exc:
            if not token.cancelled:
                self.state.set(LoadingState.error(exc.message))
        else:
            if not token.cancelled:
                self.users.set(found)
                self.cursor.has_more = len(found) >= self.page_size
                self.state.set(LoadingState.loaded())
        finally:
            self.is_refreshing.set(False)

    def is_favorite(self, user: UserProfile) -> bool:
        return self.favorites.is_favorite(user)

    def select_history_item(self, query: str) -> None:
        self.set_search_text(query)
        self.show_history.set(False)

    def clear_history(self) -> None:
        self.history.clear()

    def remove_history_item(self, query: str) -> None:
        self.history.remove(query)
