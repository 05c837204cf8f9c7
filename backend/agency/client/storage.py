from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

# both keys hold the same bearer token; older sessions only have one of them
TOKEN_KEYS: Tuple[str, ...] = ("adminToken", "authToken")


class MemoryStorage:
    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStorage:
    """Key/value storage persisted as one JSON object on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except ValueError:
            logger.warning("token storage file is corrupt, starting empty: %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=".tokens-")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.replace(tmp, self.path)

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class CookieStorage:
    """Reads request cookies and queues writes for the outgoing response."""

    def __init__(self, cookies: Mapping[str, str], max_age: Optional[int] = None, secure: bool = False) -> None:
        self.cookies: Dict[str, str] = dict(cookies or {})
        self.max_age = max_age
        self.secure = secure
        self.pending: List[Tuple[str, str, Optional[str]]] = []

    def get(self, key: str) -> Optional[str]:
        return self.cookies.get(key)

    def set(self, key: str, value: str) -> None:
        self.cookies[key] = value
        self.pending.append(("set", key, value))

    def remove(self, key: str) -> None:
        self.cookies.pop(key, None)
        self.pending.append(("delete", key, None))

    def apply(self, response) -> None:
        for op, key, value in self.pending:
            if op == "set":
                response.set_cookie(
                    key, value, max_age=self.max_age, httponly=True, secure=self.secure, samesite="strict"
                )
            else:
                response.delete_cookie(key)
        self.pending.clear()


class TokenStorage:
    def __init__(self, backend=None, keys: Iterable[str] = TOKEN_KEYS) -> None:
        self.backend = backend if backend is not None else MemoryStorage()
        self.keys = tuple(keys)

    def read(self) -> Optional[str]:
        for key in self.keys:
            value = self.backend.get(key)
            if value:
                return value
        return None

    def write(self, token: str) -> None:
        for key in self.keys:
            self.backend.set(key, token)

    def clear(self, also: Iterable[str] = ()) -> None:
        for key in (*self.keys, *also):
            self.backend.remove(key)
