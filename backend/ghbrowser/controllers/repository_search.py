import asyncio
from typing import List, Optional

from loguru import logger

from ..errors import AppError
from ..repositories.repos import ReposRepository
from ..schemas import RepositoryOrder, RepositorySort, RepositorySummary
from ..services.debounce import CancellationToken, Debouncer
from ..services.observable import Observable
from .state import LoadingState, LoadStatus, PageCursor


class RepositorySearchController:
    """Debounced repository search; ``has_more`` comes from the API's total count."""

    def __init__(
        self,
        repository: ReposRepository,
        debounce_seconds: float = 0.5,
    ):
        self.repository = repository

        self.repositories: Observable[List[RepositorySummary]] = Observable([])
        self.state: Observable[LoadingState] = Observable(LoadingState.idle())
        self.total_count: Observable[int] = Observable(0)
        self.cursor = PageCursor(has_more=False)

        self.sort = RepositorySort.stars
        self.order = RepositoryOrder.desc
        self.search_text = ""
        self._query = ""
        self._token = CancellationToken()
        self._task: Optional[asyncio.Task] = None
        self._debouncer: Debouncer[str] = Debouncer(debounce_seconds, self.perform_search)

    def set_search_text(self, text: str) -> None:
        self.search_text = text
        if not text.strip():
            self._debouncer.cancel(forget=True)
            self.perform_search(text)
            return
        self._debouncer.push(text)

    def perform_search(self, query: str) -> None:
        self._token.cancel()

        if not query.strip():
            self._query = ""
            self.cursor.reset(has_more=False)
            self.repositories.set([])
            self.total_count.set(0)
            self.state.set(LoadingState.idle())
            return

        self._query = query
        self.cursor.reset(has_more=False)
        self.repositories.set([])
        self.state.set(LoadingState.loading())
        token = CancellationToken()
        self._token = token
        self._task = asyncio.create_task(self._run_search(query, token))

    async def _run_search(self, query: str, token: CancellationToken) -> None:
        try:
            result = await self.repository.search_repositories(
                query, sort=self.sort, order=self.order, page=1
            )
        except AppError as exc:
            if not token.cancelled:
                self.state.set(LoadingState.error(exc.message))
            return
        if token.cancelled:
            return
        self.repositories.set(result.repositories)
        self.total_count.set(result.total_count)
        self.cursor.has_more = result.has_more
        self.state.set(LoadingState.loaded())

    async def wait(self) -> None:
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
            result = await self.repository.search_repositories(
                self._query, sort=self.sort, order=self.order, page=page
            )
        except AppError as exc:
            if not token.cancelled:
                logger.debug(f"Repository search page {page} failed: {exc.message}")
                self.cursor.rollback()
            return

        if token.cancelled:
            return
        if result.repositories:
            self.repositories.set([*self.repositories.value, *result.repositories])
        else:
            self.cursor.page -= 1
        self.total_count.set(result.total_count)
        self.cursor.has_more = result.has_more and bool(result.repositories)
        self.cursor.loading_more = False

    def change_sort(self, sort: RepositorySort) -> None:
        self.sort = sort
        if self.search_text.strip():
            self._debouncer.cancel()
            self.perform_search(self.search_text)

    def change_order(self, order: RepositoryOrder) -> None:
        self.order = order
        if self.search_text.strip():
            self._debouncer.cancel()
            self.perform_search(self.search_text)

    async def refresh(self) -> None:
        if not self.search_text.strip():
            return
        self._debouncer.cancel()
        self.perform_search(self.search_text)
        await self.wait()
