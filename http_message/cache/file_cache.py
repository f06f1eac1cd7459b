"""File-backed key-value cache, one file per key."""

import os
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from http_message.core.exceptions import CacheError, InvalidInputError, type_name
from http_message.core.logger import LogIcon, logger
from http_message.core.settings import settings as st

_RESERVED = re.compile(r"[{}()/\\@:]")


class SimpleFileCache:
    """Stores each value as raw bytes in ``<cache_path>/<key>``.

    There is no expiry and no eviction; ``ttl`` is accepted and ignored.
    Batch operations and ``clear`` are not supported.
    """

    __slots__ = ("_cache_path",)

    def __init__(self, cache_path: str | os.PathLike[str] | None = None) -> None:
        self._cache_path = Path(cache_path) if cache_path is not None else st.CACHE_PATH
        try:
            self._cache_path.mkdir(parents=True, exist_ok=True)
        except OSError as ex:
            raise CacheError(f'Unable to create cache directory "{self._cache_path}": {ex}') from ex

    @property
    def cache_path(self) -> Path:
        return self._cache_path

    def _file(self, key: Any) -> Path:
        if not isinstance(key, str):
            raise InvalidInputError(f'Cache key must be a string, "{type_name(key)}" given')
        if not key or key in (".", "..") or _RESERVED.search(key):
            raise InvalidInputError(f'Invalid cache key "{key}"')
        return self._cache_path / key

    def get(self, key: str, default: Any = None) -> bytes | Any:
        cache_file = self._file(key)
        if not cache_file.is_file():
            return default
        try:
            return cache_file.read_bytes()
        except OSError as ex:
            raise CacheError(f'Unable to read cache entry "{key}": {ex}') from ex

    def set(self, key: str, value: bytes | str, ttl: int | None = None) -> bool:
        cache_file = self._file(key)
        match value:
            case bytes():
                data = value
            case str():
                data = value.encode()
            case _:
                raise InvalidInputError(f'Cache value must be bytes or str, "{type_name(value)}" given')

        try:
            cache_file.write_bytes(data)
        except OSError as ex:
            raise CacheError(f'Unable to write cache entry "{key}": {ex}') from ex

        logger.debug("Cache entry stored", icon=LogIcon.CACHE, key=key, size=len(data))
        return True

    def has(self, key: str) -> bool:
        return self._file(key).is_file()

    def delete(self, key: str) -> bool:
        cache_file = self._file(key)
        try:
            cache_file.unlink()
        except FileNotFoundError:
            return False
        except OSError as ex:
            raise CacheError(f'Unable to delete cache entry "{key}": {ex}') from ex

        logger.debug("Cache entry deleted", icon=LogIcon.CACHE, key=key)
        return True

    def clear(self) -> bool:
        raise NotImplementedError("SimpleFileCache does not support clear()")

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> Mapping[str, Any]:
        raise NotImplementedError("SimpleFileCache does not support batch reads")

    def set_multiple(self, values: Mapping[str, bytes | str], ttl: int | None = None) -> bool:
        raise NotImplementedError("SimpleFileCache does not support batch writes")

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        raise NotImplementedError("SimpleFileCache does not support batch deletes")
