"""Thumbnail and avatar image cache with a download loader."""

import threading
from pathlib import Path

import requests

from thumbcompare.core import http_session
from thumbcompare.core.config import get_settings
from thumbcompare.core.logging_config import get_logger

logger = get_logger("storage.image_cache")


class ImageCache:
    """In-memory cache in front of a directory of raw image bytes."""

    def __init__(self, cache_dir: Path | str | None = None) -> None:
        self.cache_dir = Path(cache_dir).expanduser() if cache_dir else get_settings().image_cache_path
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self._memory: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def disk_path(self, key: str) -> Path:
        safe = key.replace("/", "_").replace(":", "_")
        return self.cache_dir / f"{safe}.bin"

    def get(self, key: str) -> bytes | None:
        with self._lock:
            data = self._memory.get(key)
        if data is not None:
            return data

        path = self.disk_path(key)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Could not read cached image {path.name}: {e}")
            return None

        with self._lock:
            self._memory[key] = data
        return data

    def store(self, key: str, data: bytes) -> None:
        with self._lock:
            self._memory[key] = data

        path = self.disk_path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            tmp_path.write_bytes(data)
            tmp_path.replace(path)
        except OSError as e:
            # Memory copy still serves this session
            logger.warning(f"Could not write cached image {path.name}: {e}")

    def clear_memory(self) -> None:
        with self._lock:
            self._memory.clear()


class _KeyLock:
    """Per-key download lock with a count of threads using it."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class ImageLoader:
    """
    Load images through the cache, downloading on a miss.

    At most one download runs per cache key; concurrent callers for the same
    key wait and then read the cached bytes. A key's lock is dropped once no
    caller is using it.
    """

    def __init__(self, cache: ImageCache | None = None, session_name: str = "images") -> None:
        self.cache = cache or ImageCache()
        self.session_name = session_name
        self._key_locks: dict[str, _KeyLock] = {}
        self._guard = threading.Lock()

    @staticmethod
    def cache_key(video_id: str | None, quality: str, url: str) -> str:
        return f"{video_id or url}_{quality}"

    def _acquire(self, key: str) -> _KeyLock:
        with self._guard:
            entry = self._key_locks.get(key)
            if entry is None:
                entry = self._key_locks[key] = _KeyLock()
            entry.users += 1
            return entry

    def _release(self, key: str, entry: _KeyLock) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0 and self._key_locks.get(key) is entry:
                del self._key_locks[key]

    def load(self, video_id: str | None, quality: str, url: str) -> bytes | None:
        """
        Return image bytes for a thumbnail or avatar.

        Args:
            video_id: Video ID, or None for avatars (the URL is the key then)
            quality: Thumbnail tier name
            url: Image URL

        Returns:
            Image bytes, or None when the download failed
        """
        key = self.cache_key(video_id, quality, url)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        entry = self._acquire(key)
        try:
            with entry.lock:
                cached = self.cache.get(key)
                if cached is not None:
                    return cached
                return self._download(key, url)
        finally:
            self._release(key, entry)

    def _download(self, key: str, url: str) -> bytes | None:
        try:
            response = http_session.get(url, session_name=self.session_name)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Image download failed for {url}: {e}")
            return None

        data = response.content
        if not data:
            return None
        self.cache.store(key, data)
        return data
