import asyncio
import contextlib
import hashlib
import os
import shutil
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Any, Optional, Type, TypeVar
from urllib.parse import quote

from loguru import logger
from pydantic import ValidationError

from ..codec import decode_json, encode
from ..config import Settings

T = TypeVar("T")


@dataclass
class CacheStats:
    hit: int = 0
    miss: int = 0
    write: int = 0


class CacheStore:
    """Two-tier key/value cache: a bounded LRU map in memory over one file per key on disk.

    Values are stored as their canonical JSON encoding, so any entity type
    round-trips through ``put``/``get`` given the same ``kind``. There is no
    expiry; freshness is handled by the repositories revalidating in the
    background.
    """

    def __init__(self, directory: Path, count_limit: int = 100, total_bytes: int = 50 * 1024 * 1024):
        self.directory = Path(directory)
        self.count_limit = count_limit
        self.total_bytes = total_bytes
        self.stats = CacheStats()
        self._mu = Lock()
        self._memory: "OrderedDict[str, bytes]" = OrderedDict()
        self._memory_bytes = 0
        self._ensure_directory()

    @classmethod
    def from_settings(cls, settings: Settings) -> "CacheStore":
        return cls(
            settings.cache_dir,
            count_limit=settings.cache_count_limit,
            total_bytes=settings.cache_total_bytes,
        )

    async def put(self, key: str, value: Any, kind: Any) -> None:
        data = encode(value, kind)
        with self._mu:
            self._remember(key, data)
            self.stats.write += 1
        await asyncio.to_thread(self._write_disk, key, data)

    async def get(self, key: str, kind: Type[T]) -> Optional[T]:
        with self._mu:
            data = self._recall(key)
        from_disk = data is None
        if from_disk:
            data = await asyncio.to_thread(self._read_disk, key)
        if data is None:
            self._count_miss()
            return None

        try:
            value = decode_json(data, kind)
        except ValidationError as exc:
            logger.debug(f"Cache entry {key!r} failed to decode, treating as miss: {exc.error_count()} errors")
            self._count_miss()
            return None

        with self._mu:
            if from_disk:
                self._remember(key, data)
            self.stats.hit += 1
        return value

    async def clear(self) -> None:
        with self._mu:
            self._memory.clear()
            self._memory_bytes = 0
        await asyncio.to_thread(self._reset_directory)

    def memory_keys(self) -> list[str]:
        with self._mu:
            return list(self._memory)

    def _count_miss(self) -> None:
        with self._mu:
            self.stats.miss += 1

    # -- memory tier (caller holds self._mu) ------------------------------

    def _remember(self, key: str, data: bytes) -> None:
        old = self._memory.pop(key, None)
        if old is not None:
            self._memory_bytes -= len(old)
        if len(data) > self.total_bytes:
            return
        self._memory[key] = data
        self._memory_bytes += len(data)
        while len(self._memory) > self.count_limit or self._memory_bytes > self.total_bytes:
            _, evicted = self._memory.popitem(last=False)
            self._memory_bytes -= len(evicted)

    def _recall(self, key: str) -> Optional[bytes]:
        data = self._memory.get(key)
        if data is not None:
            self._memory.move_to_end(key)
        return data

    # -- disk tier ---------------------------------------------------------

    def _path(self, key: str) -> Path:
        name = quote(key, safe="")
        if len(name) > 200:
            name = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / name

    def _ensure_directory(self) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning(f"Cannot create cache directory {self.directory}: {exc}")

    def _reset_directory(self) -> None:
        shutil.rmtree(self.directory, ignore_errors=True)
        self._ensure_directory()

    def _read_disk(self, key: str) -> Optional[bytes]:
        try:
            return self._path(key).read_bytes()
        except OSError:
            return None

    def _write_disk(self, key: str, data: bytes) -> None:
        path = self._path(key)
        tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            # atomic rename: concurrent writers to one key end as last-write-wins
            os.replace(tmp, path)
        except OSError as exc:
            logger.debug(f"Disk cache write for {key!r} failed: {exc}")
            with contextlib.suppress(OSError):
                tmp.unlink()
