import json
import logging
import os
import threading
from typing import Dict, List, Optional

from moviemonth.errors import MovieParseError
from moviemonth.movies import MovieResult, parse_movie_result

logger = logging.getLogger(__name__)


class MovieCache:
    """Durable key-value store for movie results, one JSON file per key.

    Entries never expire; they live until :meth:`clear` is called or the
    directory is removed.  Concurrent writers for the same key overwrite each
    other (last writer wins).
    """

    def __init__(self, cache_dir: str = ".cache/movies") -> None:
        self.cache_dir = cache_dir
        os.makedirs(cache_dir, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.cache_dir, f"{key}.json")

    def get(self, key: str) -> Optional[str]:
        cache_file = self._path(key)
        if not os.path.exists(cache_file):
            return None
        try:
            with open(cache_file, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Failed to read cache entry %s: %s", key, exc)
            return None
        if not isinstance(data, dict):
            return None
        return data.get("value")

    def set(self, key: str, value: str) -> None:
        cache_file = self._path(key)
        tmp_file = f"{cache_file}.{os.getpid()}.{threading.get_ident()}.tmp"
        try:
            with open(tmp_file, "w", encoding="utf-8") as handle:
                json.dump({"key": key, "value": value}, handle, ensure_ascii=False)
            os.replace(tmp_file, cache_file)
        except OSError as exc:
            logger.warning("Failed to write cache entry %s: %s", key, exc)
            try:
                os.remove(tmp_file)
            except OSError:
                pass
            raise

    def remove(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass

    def keys(self) -> List[str]:
        return sorted(
            filename[: -len(".json")]
            for filename in os.listdir(self.cache_dir)
            if filename.endswith(".json")
        )

    def clear(self) -> None:
        for key in self.keys():
            self.remove(key)

    def get_result(self, key: str) -> Optional[MovieResult]:
        cached = self.get(key)
        if not cached:
            return None
        try:
            return parse_movie_result(cached)
        except MovieParseError as exc:
            logger.warning("Cached entry %s failed validation: %s", key, exc)
            return None

    def set_result(self, key: str, result: MovieResult) -> None:
        self.set(key, result.to_json())


class MemoryMovieCache(MovieCache):
    """In-process variant with the same interface, used for ephemeral runs."""

    def __init__(self) -> None:
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self.data)
