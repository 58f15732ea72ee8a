import asyncio
from pathlib import Path
from typing import List

from ghbrowser.schemas import RepositoryDetail, RepositorySummary, UserProfile
from ghbrowser.services.cache import CacheStore

from conftest import make_repo, make_user


def test_put_then_get_from_memory(tmp_path: Path) -> None:
    async def scenario():
        cache = CacheStore(tmp_path / "cache")
        users = [make_user(1), make_user(2)]
        await cache.put("search_test_page1", users, List[UserProfile])
        return cache, await cache.get("search_test_page1", List[UserProfile])

    cache, value = asyncio.run(scenario())
    assert value == [make_user(1), make_user(2)]
    assert cache.stats.hit == 1 and cache.stats.write == 1


def test_disk_hit_is_promoted_to_memory(tmp_path: Path) -> None:
    repos = [make_repo(1, stargazers_count=5, language="Go")]

    async def scenario():
        await CacheStore(tmp_path).put("repos_x_stars_desc_page1", repos, List[RepositorySummary])
        fresh = CacheStore(tmp_path)
        assert fresh.memory_keys() == []
        value = await fresh.get("repos_x_stars_desc_page1", List[RepositorySummary])
        return fresh, value

    fresh, value = asyncio.run(scenario())
    assert value == repos
    assert value[0].stars == 5
    assert fresh.memory_keys() == ["repos_x_stars_desc_page1"]


def test_miss_returns_none(tmp_path: Path) -> None:
    cache = CacheStore(tmp_path)
    assert asyncio.run(cache.get("nothing", UserProfile)) is None
    assert cache.stats.miss == 1


def test_undecodable_entry_is_a_miss(tmp_path: Path) -> None:
    async def scenario():
        cache = CacheStore(tmp_path)
        await cache.put("k", [make_user(1)], List[UserProfile])
        return await cache.get("k", RepositoryDetail)

    assert asyncio.run(scenario()) is None


def test_corrupt_file_on_disk_is_a_miss(tmp_path: Path) -> None:
    cache = CacheStore(tmp_path)
    (tmp_path / "user_octocat").write_bytes(b"\x00garbage")
    assert asyncio.run(cache.get("user_octocat", UserProfile)) is None


def test_lru_eviction_by_count(tmp_path: Path) -> None:
    async def scenario():
        cache = CacheStore(tmp_path, count_limit=2)
        for key in ("a", "b"):
            await cache.put(key, make_user(1, key), UserProfile)
        await cache.get("a", UserProfile)
        await cache.put("c", make_user(3, "c"), UserProfile)
        keys = cache.memory_keys()
        # evicted from memory, still on disk
        from_disk = await cache.get("b", UserProfile)
        return keys, from_disk

    keys, from_disk = asyncio.run(scenario())
    assert keys == ["a", "c"]
    assert from_disk is not None and from_disk.login == "b"


def test_byte_budget_limits_memory(tmp_path: Path) -> None:
    async def scenario():
        cache = CacheStore(tmp_path, total_bytes=64)
        await cache.put("big", make_user(1, bio="x" * 500), UserProfile)
        keys = cache.memory_keys()
        return keys, await cache.get("big", UserProfile)

    keys, value = asyncio.run(scenario())
    assert keys == []
    assert value is not None and value.bio == "x" * 500


def test_keys_with_path_characters(tmp_path: Path) -> None:
    async def scenario():
        cache = CacheStore(tmp_path)
        await cache.put("search_a/b c_page1", [make_user(1)], List[UserProfile])
        return await CacheStore(tmp_path).get("search_a/b c_page1", List[UserProfile])

    assert asyncio.run(scenario()) == [make_user(1)]


def test_disk_write_failure_is_swallowed(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied")

    async def scenario():
        cache = CacheStore(blocker)
        await cache.put("k", make_user(1), UserProfile)
        return await cache.get("k", UserProfile)

    assert asyncio.run(scenario()) == make_user(1)


def test_clear_empties_both_tiers(tmp_path: Path) -> None:
    directory = tmp_path / "cache"

    async def scenario():
        cache = CacheStore(directory)
        await cache.put("k", make_user(1), UserProfile)
        await cache.clear()
        return cache, await cache.get("k", UserProfile)

    cache, value = asyncio.run(scenario())
    assert value is None
    assert cache.memory_keys() == []
    assert directory.is_dir()
    assert list(directory.iterdir()) == []
