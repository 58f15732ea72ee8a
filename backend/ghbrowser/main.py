from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from .config import get_settings
from .container import AppContainer
from .errors import AppError, NotFound, RateLimited, Unauthorized, ValidationFailed
from .logger import setup_logging
from .schemas import (
    RepositoryDetail,
    RepositoryOrder,
    RepositorySearchResult,
    RepositorySort,
    RepositorySummary,
    UserProfile,
)

settings = get_settings()
setup_logging(settings.log_level)

_container: Optional[AppContainer] = None


def get_container() -> AppContainer:
    global _container
    if _container is None:
        _container = AppContainer.from_settings(settings)
    return _container


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if _container is not None:
        await _container.aclose()


app = FastAPI(title="GitHub Browser", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_STATUS = (
    (NotFound, 404),
    (Unauthorized, 401),
    (RateLimited, 429),
    (ValidationFailed, 422),
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    status = next((code for kind, code in ERROR_STATUS if isinstance(exc, kind)), 502)
    logger.info(f"{request.method} {request.url.path} -> {status}: {exc.message}")
    return JSONResponse(status_code=status, content={"detail": exc.message})


@app.get("/health")
async def health():
    return {"status": "ok", "timestamp": datetime.utcnow().isoformat()}


@app.get("/connectivity")
async def connectivity(container: AppContainer = Depends(get_container)):
    return {"online": await container.connectivity.probe()}


@app.get("/users/search", response_model=List[UserProfile])
async def search_users(
    q: str = Query(""),
    page: int = Query(1, ge=1),
    container: AppContainer = Depends(get_container),
):
    users = await container.users.search_users(q, page=page)
    if users and page == 1:
        container.history.add(q)
    return users


@app.get("/users/{username}", response_model=UserProfile)
async def get_user(username: str, container: AppContainer = Depends(get_container)):
    return await container.users.get_user(username)


@app.get("/users/{username}/repos", response_model=List[RepositorySummary])
async def get_user_repositories(
    username: str,
    sort: Optional[RepositorySort] = Query(None),
    order: Optional[RepositoryOrder] = Query(None),
    page: int = Query(1, ge=1),
    container: AppContainer = Depends(get_container),
):
    return await container.repos.get_repositories(username, sort=sort, order=order, page=page)


@app.get("/repos/{owner}/{repo}", response_model=RepositoryDetail)
async def get_repository(owner: str, repo: str, container: AppContainer = Depends(get_container)):
    return await container.repos.get_repository(owner, repo)


@app.get("/search/repositories", response_model=RepositorySearchResult)
async def search_repositories(
    q: str = Query(""),
    sort: Optional[RepositorySort] = Query(RepositorySort.stars),
    order: Optional[RepositoryOrder] = Query(RepositoryOrder.desc),
    page: int = Query(1, ge=1),
    container: AppContainer = Depends(get_container),
):
    return await container.repos.search_repositories(q, sort=sort, order=order, page=page)


@app.get("/favorites/users", response_model=List[UserProfile])
async def list_favorite_users(container: AppContainer = Depends(get_container)):
    return container.favorite_users.all()


@app.put("/favorites/users", response_model=List[UserProfile])
async def add_favorite_user(user: UserProfile, container: AppContainer = Depends(get_container)):
    container.favorite_users.add(user)
    return container.favorite_users.all()


@app.delete("/favorites/users/{user_id}", response_model=List[UserProfile])
async def remove_favorite_user(user_id: int, container: AppContainer = Depends(get_container)):
    container.favorite_users.remove_id(user_id)
    return container.favorite_users.all()


@app.get("/favorites/repositories", response_model=List[RepositorySummary])
async def list_favorite_repositories(container: AppContainer = Depends(get_container)):
    return container.favorite_repositories.all()


@app.put("/favorites/repositories", response_model=List[RepositorySummary])
async def add_favorite_repository(
    repository: RepositorySummary, container: AppContainer = Depends(get_container)
):
    container.favorite_repositories.add(repository)
    return container.favorite_repositories.all()


@app.delete("/favorites/repositories/{repository_id}", response_model=List[RepositorySummary])
async def remove_favorite_repository(repository_id: int, container: AppContainer = Depends(get_container)):
    container.favorite_repositories.remove_id(repository_id)
    return container.favorite_repositories.all()


@app.get("/history", response_model=List[str])
async def get_history(container: AppContainer = Depends(get_container)):
    return container.history.entries()


@app.delete("/history", response_model=List[str])
async def clear_history(container: AppContainer = Depends(get_container)):
    container.history.clear()
    return container.history.entries()


@app.delete("/history/{query}", response_model=List[str])
async def remove_history_item(query: str, container: AppContainer = Depends(get_container)):
    container.history.remove(query)
    return container.history.entries()


@app.delete("/cache")
async def clear_cache(container: AppContainer = Depends(get_container)):
    await container.cache.clear()
    return {"status": "cleared"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8020)
