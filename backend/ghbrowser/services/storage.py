"""Small durable key/value stores for favorites and search history."""

import json
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, Optional, Protocol

from loguru import logger


class KeyValueStore(Protocol):
    def read(self, key: str) -> Optional[Any]:
        ...

    def write(self, key: str, value: Any) -> None:
        ...


class JsonFileStore:
    """All keys live in one JSON object on disk; writes replace the file atomically."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._mu = Lock()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(f"Ignoring unreadable store {self.path}: {exc}")
            return {}
        return data if isinstance(data, dict) else {}

    def read(self, key: str) -> Optional[Any]:
        with self._mu:
            return self._load().get(key)

    def write(self, key: str, value: Any) -> None:
        with self._mu:
            data = self._load()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex}.tmp")
            tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp, self.path)


class ReloadMarker:
    """Tells out-of-process readers (the widget) that shared content changed."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def __call__(self, key: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"key": key, "changed_at": datetime.now(timezone.utc).isoformat()}
        self.path.write_text(json.dumps(payload), encoding="utf-8")


class MirroredStore:
    """Writes go to the private store, then the shared one; reads prefer the shared copy.

    The shared side is best-effort: a failed shared write or ``notify`` is
    logged and the private write stands.
    """

    def __init__(
        self,
        primary: KeyValueStore,
        shared: KeyValueStore,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self.primary = primary
        self.shared = shared
        self.notify = notify

    def read(self, key: str) -> Optional[Any]:
        value = self.shared.read(key)
        if value is None:
            value = self.primary.read(key)
        return value

    def write(self, key: str, value: Any) -> None:
        self.primary.write(key, value)
        try:
            self.shared.write(key, value)
        except Exception as exc:
            logger.warning(f"Shared store write for {key!r} failed: {exc}")
            return
        if self.notify is None:
            return
        try:
            self.notify(key)
        except Exception as exc:
            logger.warning(f"Shared store notification for {key!r} failed: {exc}")
