"""Application constants.

This module centralizes application-wide constants for:
- Application metadata
- YouTube Data API endpoints and limits
- Feed filtering thresholds
- Thumbnail quality preferences
"""

# =============================================================================
# Application Metadata
# =============================================================================

APP_NAME = "ThumbCompare"
APP_DESCRIPTION = "Compare your thumbnail against the latest competitor feed"
APP_VERSION = "0.3.0"

# =============================================================================
# YouTube Data API
# =============================================================================

# Primary host first; the second is only tried when the first cannot be resolved
YOUTUBE_API_HOSTS = ("www.googleapis.com", "youtube.googleapis.com")
YOUTUBE_API_BASE_PATH = "/youtube/v3"

CHANNEL_PARTS = "id,contentDetails,snippet"
PLAYLIST_ITEM_PARTS = "snippet"
VIDEO_DETAIL_PARTS = "contentDetails,statistics"
SEARCH_PARTS = "snippet"

# Page size ceiling for playlistItems.list and id cap for videos.list
MAX_PAGE_SIZE = 50
MAX_VIDEO_IDS_PER_REQUEST = 50

# Hosts accepted when parsing channel URLs
YOUTUBE_HOST_MARKERS = ("youtube.com", "youtu.be")

# =============================================================================
# Feed
# =============================================================================

DEFAULT_LATEST_COUNT = 12
MIN_LATEST_COUNT = 3
MAX_LATEST_COUNT = 30

# Videos at or under this duration are treated as Shorts
SHORT_MAX_SECONDS = 180
SHORTS_TITLE_MARKER = "#shorts"

# =============================================================================
# Thumbnails
# =============================================================================

THUMBNAIL_PREFERENCE = ("maxres", "standard", "high", "medium", "default")
AVATAR_PREFERENCE = ("high", "medium", "default")

LANDSCAPE_MIN_RATIO = 1.2
WIDESCREEN_MIN_RATIO = 1.65
WIDESCREEN_MAX_RATIO = 1.95

# =============================================================================
# Credential store keys
# =============================================================================

CREDENTIAL_API_KEY = "youtube_api_key"
CREDENTIAL_SEARCH_FALLBACK = "use_search_fallback"
