"""Local credential store for the API key and the search fallback flag."""

import json
import os
from pathlib import Path

from thumbcompare.core.config import Settings, get_settings
from thumbcompare.core.constants import CREDENTIAL_API_KEY, CREDENTIAL_SEARCH_FALLBACK
from thumbcompare.core.logging_config import get_logger

logger = get_logger("storage.credentials")


class CredentialStore:
    """
    Small key/value store kept in a user-only JSON file.

    ``load`` returns None for unknown keys or an unreadable file; ``save``
    reports failure with False instead of raising.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path).expanduser() if path else get_settings().credentials_path

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read credential store {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def load(self, key: str) -> str | None:
        return self._read().get(key)

    def save(self, key: str, value: str) -> bool:
        data = self._read()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(".tmp")
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Could not save {key} to credential store: {e}")
            return False
        return True


def load_api_key(store: CredentialStore, settings: Settings | None = None) -> str:
    """API key from the store, falling back to the YOUTUBE_API_KEY setting."""
    settings = settings or get_settings()
    stored = (store.load(CREDENTIAL_API_KEY) or "").strip()
    return stored or settings.youtube_api_key.strip()


def load_search_fallback(store: CredentialStore, settings: Settings | None = None) -> bool:
    """Search fallback flag from the store ("1"/"0"), else the setting."""
    settings = settings or get_settings()
    stored = store.load(CREDENTIAL_SEARCH_FALLBACK)
    if stored is None:
        return settings.youtube_search_fallback
    return stored == "1"


def save_settings(store: CredentialStore, api_key: str, use_search_fallback: bool) -> bool:
    """Persist both user settings; True only if both writes succeeded."""
    saved_key = store.save(CREDENTIAL_API_KEY, api_key.strip())
    saved_flag = store.save(CREDENTIAL_SEARCH_FALLBACK, "1" if use_search_fallback else "0")
    return saved_key and saved_flag


def mask_secret(value: str) -> str:
    """Show only the last four characters of a secret."""
    if not value:
        return "(not set)"
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]
