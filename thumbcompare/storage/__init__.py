"""Local storage collaborators: credentials and image cache."""

from .credentials import (
    CredentialStore,
    load_api_key,
    load_search_fallback,
    mask_secret,
    save_settings,
)
from .image_cache import ImageCache, ImageLoader

__all__ = [
    "CredentialStore",
    "load_api_key",
    "load_search_fallback",
    "save_settings",
    "mask_secret",
    "ImageCache",
    "ImageLoader",
]
