from typing import List, Optional

from loguru import logger

from ..errors import AppError
from ..repositories.repos import ReposRepository
from ..schemas import RepositoryOrder, RepositorySort, RepositorySummary
from ..services.debounce import CancellationToken
from ..services.observable import Observable
from .filters import apply_filters
from .state import LoadingState, LoadStatus, PageCursor


class RepositoryListController:
    """Paginated repositories of one user, with a locally filtered ``visible`` list.

    Sort and order changes refetch from page 1; text and language filters
    only recompute ``visible``.
    """

    def __init__(self, username: str, repository: ReposRepository, page_size: int = 30):
        self.username = username
        self.repository = repository
        self.page_size = page_size

        self.repositories: Observable[List[RepositorySummary]] = Observable([])
        self.visible: Observable[List[RepositorySummary]] = Observable([])
        self.state: Observable[LoadingState] = Observable(LoadingState.idle())
        self.cursor = PageCursor()

        self.sort = RepositorySort.updated
        self.order = RepositoryOrder.desc
        self.language: Optional[str] = None
        self.filter_text = ""
        self._token = CancellationToken()

        self.repositories.subscribe(lambda _: self._recompute(), emit_current=False)

    @property
    def available_languages(self) -> List[str]:
        return sorted({r.language for r in self.repositories.value if r.language})

    def _recompute(self) -> None:
        self.visible.set(
            apply_filters(
                self.repositories.value,
                text=self.filter_text,
                language=self.language,
                sort=self.sort,
                order=self.order,
            )
        )

    def _restart(self) -> CancellationToken:
        self._token.cancel()
        self._token = CancellationToken()
        self.cursor.reset()
        return self._token

    async def _fetch_first_page(self, token: CancellationToken) -> None:
        try:
            repos = await self.repository.get_repositories(
                self.username, sort=self.sort, order=self.order, page=1
            )
        except AppError as exc:
            if not token.cancelled:
                self.state.set(LoadingState.error(exc.message))
            return
        if token.cancelled:
            return
        self.repositories.set(repos)
        self.cursor.has_more = len(repos) >= self.page_size
        self.state.set(LoadingState.loaded())

    async def load(self) -> None:
        token = self._restart()
        self.state.set(LoadingState.loading())
        await self._fetch_first_page(token)

    async def refresh(self) -> None:
        await self.load()

    async def load_next_page(self) -> None:
        if self.state.value.status != LoadStatus.loaded:
            return
        page = self.cursor.begin_next()
        if page is None:
            return

        token = self._token
        try:
            more = await self.repository.get_repositories(
                self.username, sort=self.sort, order=self.order, page=page
            )
        except AppError as exc:
            if not token.cancelled:
                logger.debug(f"Repositories page {page} of {self.username} failed: {exc.message}")
                self.cursor.rollback()
            return

        if token.cancelled:
            return
        if more:
            self.repositories.set([*self.repositories.value, *more])
        self.cursor.finish_next(len(more), self.page_size)

    async def change_sort(self, sort: RepositorySort) -> None:
        self.sort = sort
        self._recompute()
        await self.load()

    async def change_order(self, order: RepositoryOrder) -> None:
        self.order = order
        self._recompute()
        await self.load()

    def set_filter_text(self, text: str) -> None:
        self.filter_text = text
        self._recompute()

    def filter_by_language(self, language: Optional[str]) -> None:
        self.language = language
        self._recompute()

    def clear_language_filter(self) -> None:
        self.filter_by_language(None)
