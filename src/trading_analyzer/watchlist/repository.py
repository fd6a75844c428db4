from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)


class KeyValueRepository(ABC):
    """Minimal string-keyed store for JSON-compatible values."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    @abstractmethod
    def items(self) -> Iterator[Tuple[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    def list(self) -> list[Tuple[str, Any]]:
        return list(self.items())


class InMemoryRepository(KeyValueRepository):
    def __init__(self, initial: Dict[str, Any] | None = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def items(self) -> Iterator[Tuple[str, Any]]:
        return iter(list(self._data.items()))

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileRepository(KeyValueRepository):
    """All keys kept in one JSON object on disk, rewritten on every change."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def _load(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring store %s: top level is not an object", self._path)
            return {}
        return payload

    def _save(self, data: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
        tmp.replace(self._path)

    def get(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    def items(self) -> Iterator[Tuple[str, Any]]:
        return iter(list(self._load().items()))

    def put(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)
