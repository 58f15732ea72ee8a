from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LoadStatus(str, Enum):
    idle = "idle"
    loading = "loading"
    loaded = "loaded"
    error = "error"


@dataclass(frozen=True)
class LoadingState:
    status: LoadStatus
    message: Optional[str] = None

    @classmethod
    def idle(cls) -> "LoadingState":
        return cls(LoadStatus.idle)

    @classmethod
    def loading(cls) -> "LoadingState":
        return cls(LoadStatus.loading)

    @classmethod
    def loaded(cls) -> "LoadingState":
        return cls(LoadStatus.loaded)

    @classmethod
    def error(cls, message: str) -> "LoadingState":
        return cls(LoadStatus.error, message)


@dataclass
class PageCursor:
    """Pagination position of one list.

    ``page`` only stays advanced after a successful, non-empty fetch.
    """

    page: int = 1
    has_more: bool = True
    loading_more: bool = False

    def reset(self, has_more: bool = True) -> None:
        self.page = 1
        self.has_more = has_more
        self.loading_more = False

    def begin_next(self) -> Optional[int]:
        """Claim the next page, or return None if a fetch is running or the list is exhausted."""
        if self.loading_more or not self.has_more:
            return None
        self.loading_more = True
        self.page += 1
        return self.page

    def finish_next(self, returned: int, page_size: int) -> None:
        if returned == 0:
            self.page -= 1
            self.has_more = False
        else:
            self.has_more = returned >= page_size
        self.loading_more = False

    def rollback(self) -> None:
        self.page -= 1
        self.loading_more = False
