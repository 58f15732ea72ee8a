from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RepositorySort(str, Enum):
    created = "created"
    updated = "updated"
    pushed = "pushed"
    full_name = "full_name"
    stars = "stars"


class RepositoryOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class Entity(BaseModel):
    """Immutable snapshot decoded from the API or from the cache."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class UserProfile(Entity):
    id: int
    login: str
    avatar_url: str
    name: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    public_repos: int
    followers: int
    following: int
    html_url: str
    blog: Optional[str] = None
    created_at: str


class SearchUserStub(Entity):
    id: int
    login: str
    avatar_url: str
    html_url: str

    def to_profile(self) -> UserProfile:
        # search results carry no counts or bio, pad them out
        return UserProfile(
            id=self.id,
            login=self.login,
            avatar_url=self.avatar_url,
            public_repos=0,
            followers=0,
            following=0,
            html_url=self.html_url,
            created_at="",
        )


class UserSearchResponse(Entity):
    total_count: int
    incomplete_results: bool = False
    items: List[SearchUserStub]


class RepositorySummary(Entity):
    id: int
    name: str
    full_name: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int = Field(alias="stargazers_count")
    forks: int
    html_url: str
    updated_at: str


class License(Entity):
    key: str
    name: str
    spdx_id: Optional[str] = None
    url: Optional[str] = None


class RepositoryOwner(Entity):
    login: str
    avatar_url: str
    html_url: str


class RepositoryDetail(Entity):
    id: int
    name: str
    full_name: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int = Field(alias="stargazers_count")
    forks: int
    watchers: int
    html_url: str
    clone_url: str
    default_branch: str
    created_at: str
    updated_at: str
    pushed_at: Optional[str] = None
    homepage: Optional[str] = None
    topics: List[str] = []
    license: Optional[License] = None
    owner: RepositoryOwner
    is_private: bool = Field(alias="private")
    is_archived: bool = Field(alias="archived")
    is_fork: bool = Field(alias="fork")
    open_issues_count: int
    size: int  # KB


class RepositorySearchResponse(Entity):
    total_count: int
    incomplete_results: bool = False
    items: List[RepositorySummary]


class RepositorySearchResult(Entity):
    repositories: List[RepositorySummary]
    total_count: int
    has_more: bool
