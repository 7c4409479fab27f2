"""Tests for the credential store and the image cache."""

import os
import stat
import threading
from unittest.mock import MagicMock, patch

import pytest
import requests

from thumbcompare.core.constants import CREDENTIAL_API_KEY, CREDENTIAL_SEARCH_FALLBACK
from thumbcompare.storage import (
    CredentialStore,
    ImageCache,
    ImageLoader,
    load_api_key,
    load_search_fallback,
    mask_secret,
    save_settings,
)


class TestCredentialStore:
    """Test persistence of user credentials."""

    def test_round_trip(self, credential_store):
        assert credential_store.save(CREDENTIAL_API_KEY, "abc123")
        assert credential_store.load(CREDENTIAL_API_KEY) == "abc123"
        assert CredentialStore(credential_store.path).load(CREDENTIAL_API_KEY) == "abc123"

    def test_missing_key_and_file(self, credential_store):
        assert credential_store.load(CREDENTIAL_API_KEY) is None
        credential_store.save("other", "x")
        assert credential_store.load(CREDENTIAL_API_KEY) is None

    def test_corrupt_file_reads_as_empty(self, credential_store):
        credential_store.path.write_text("{not json", encoding="utf-8")
        assert credential_store.load(CREDENTIAL_API_KEY) is None

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_file_is_user_only(self, credential_store):
        credential_store.save(CREDENTIAL_API_KEY, "secret")
        mode = stat.S_IMODE(credential_store.path.stat().st_mode)
        assert mode == 0o600

    def test_save_failure_returns_false(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory")
        store = CredentialStore(blocker / "credentials.json")
        assert store.save(CREDENTIAL_API_KEY, "x") is False

    def test_save_settings(self, credential_store):
        assert save_settings(credential_store, "  key-1  ", True)
        assert credential_store.load(CREDENTIAL_API_KEY) == "key-1"
        assert credential_store.load(CREDENTIAL_SEARCH_FALLBACK) == "1"
        save_settings(credential_store, "key-1", False)
        assert credential_store.load(CREDENTIAL_SEARCH_FALLBACK) == "0"


class TestCredentialLookup:
    def test_stored_key_wins_over_setting(self, credential_store, settings):
        settings.youtube_api_key = "from-env"
        credential_store.save(CREDENTIAL_API_KEY, "from-store")
        assert load_api_key(credential_store, settings) == "from-store"

    def test_falls_back_to_setting(self, credential_store, settings):
        settings.youtube_api_key = " from-env "
        credential_store.save(CREDENTIAL_API_KEY, "   ")
        assert load_api_key(credential_store, settings) == "from-env"

    def test_no_key_anywhere(self, credential_store, settings):
        assert load_api_key(credential_store, settings) == ""

    def test_search_fallback_flag(self, credential_store, settings):
        assert load_search_fallback(credential_store, settings) is False
        settings.youtube_search_fallback = True
        assert load_search_fallback(credential_store, settings) is True
        credential_store.save(CREDENTIAL_SEARCH_FALLBACK, "0")
        assert load_search_fallback(credential_store, settings) is False


@pytest.mark.parametrize(
    "value,expected",
    [("", "(not set)"), ("abc", "***"), ("AIzaSyExample1234", "*************1234")],
)
def test_mask_secret(value, expected):
    assert mask_secret(value) == expected


class TestImageCache:
    def test_memory_and_disk(self, tmp_path):
        cache = ImageCache(tmp_path / "cache")
        cache.store("vid_high", b"jpeg-bytes")

        assert cache.get("vid_high") == b"jpeg-bytes"
        assert (tmp_path / "cache" / "vid_high.bin").read_bytes() == b"jpeg-bytes"

        cache.clear_memory()
        assert cache.get("vid_high") == b"jpeg-bytes"

    def test_survives_new_instance(self, tmp_path):
        ImageCache(tmp_path).store("k", b"data")
        assert ImageCache(tmp_path).get("k") == b"data"

    def test_miss(self, tmp_path):
        assert ImageCache(tmp_path).get("missing") is None

    def test_url_keys_are_sanitized(self, tmp_path):
        cache = ImageCache(tmp_path)
        key = ImageLoader.cache_key(None, "avatar", "https://yt3.ggpht.com/abc")
        assert cache.disk_path(key).name == "https___yt3.ggpht.com_abc_avatar.bin"


def fake_response(content: bytes = b"img", status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.content = content
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


class TestImageLoader:
    """Test cached image downloads."""

    def test_cache_key(self):
        assert ImageLoader.cache_key("abc", "high", "https://i.ytimg.com/x") == "abc_high"

    def test_downloads_once_then_serves_cache(self, tmp_path):
        loader = ImageLoader(ImageCache(tmp_path))
        with patch(
            "thumbcompare.storage.image_cache.http_session.get", return_value=fake_response()
        ) as mock_get:
            assert loader.load("abc", "high", "https://i.ytimg.com/vi/abc/hq.jpg") == b"img"
            assert loader.load("abc", "high", "https://i.ytimg.com/vi/abc/hq.jpg") == b"img"

        mock_get.assert_called_once_with(
            "https://i.ytimg.com/vi/abc/hq.jpg", session_name="images"
        )

    def test_http_error_returns_none(self, tmp_path):
        loader = ImageLoader(ImageCache(tmp_path))
        with patch(
            "thumbcompare.storage.image_cache.http_session.get",
            return_value=fake_response(status_code=404),
        ):
            assert loader.load("abc", "high", "https://i.ytimg.com/vi/abc/hq.jpg") is None
        assert loader.cache.get("abc_high") is None

    def test_connection_error_returns_none(self, tmp_path):
        loader = ImageLoader(ImageCache(tmp_path))
        with patch(
            "thumbcompare.storage.image_cache.http_session.get",
            side_effect=requests.ConnectionError("offline"),
        ):
            assert loader.load("abc", "high", "https://i.ytimg.com/vi/abc/hq.jpg") is None

    def test_key_locks_are_released(self, tmp_path):
        loader = ImageLoader(ImageCache(tmp_path))
        with patch(
            "thumbcompare.storage.image_cache.http_session.get",
            side_effect=[fake_response(b"a"), fake_response(status_code=500)],
        ):
            loader.load("one", "high", "https://i.ytimg.com/vi/one/hq.jpg")
            loader.load("two", "high", "https://i.ytimg.com/vi/two/hq.jpg")

        assert loader._key_locks == {}

    def test_concurrent_callers_share_one_download(self, tmp_path):
        loader = ImageLoader(ImageCache(tmp_path))
        started = threading.Event()
        release = threading.Event()

        def slow_get(url, session_name):
            started.set()
            release.wait(timeout=5)
            return fake_response(b"img")

        results = []
        with patch("thumbcompare.storage.image_cache.http_session.get", side_effect=slow_get) as mock_get:
            threads = [
                threading.Thread(
                    target=lambda: results.append(
                        loader.load("abc", "high", "https://i.ytimg.com/vi/abc/hq.jpg")
                    )
                )
                for _ in range(3)
            ]
            for t in threads:
                t.start()
            started.wait(timeout=5)
            release.set()
            for t in threads:
                t.join(timeout=5)

        assert results == [b"img", b"img", b"img"]
        assert mock_get.call_count == 1
        assert loader._key_locks == {}
