"""Frontmatter keys and file naming shared by the Keep sync features."""

FRONTMATTER_GOOGLE_KEEP_CREATED_DATE_KEY = "GoogleKeepCreatedDate"
FRONTMATTER_GOOGLE_KEEP_UPDATED_DATE_KEY = "GoogleKeepUpdatedDate"
FRONTMATTER_KEEP_SIDIAN_LAST_SYNCED_DATE_KEY = "KeepSidianLastSyncedDate"
FRONTMATTER_GOOGLE_KEEP_URL_KEY = "GoogleKeepUrl"

# Legacy hyphenated keys written by older releases
LEGACY_FRONTMATTER_KEYS = {
    "google-keep-created-date": FRONTMATTER_GOOGLE_KEEP_CREATED_DATE_KEY,
    "google-keep-updated-date": FRONTMATTER_GOOGLE_KEEP_UPDATED_DATE_KEY,
    "google-keep-url": FRONTMATTER_GOOGLE_KEEP_URL_KEY,
}

CONFLICT_FILE_SUFFIX = "-conflict-"
MEDIA_FOLDER_NAME = "media"
SYNC_LOG_FOLDER_NAME = "_KeepSidianLogs"

CONFLICT_START_MARKER = "<<<<<<< existing"
CONFLICT_SEPARATOR = "======="
CONFLICT_END_MARKER = ">>>>>>> incoming"

DEFAULT_PAGE_SIZE = 50
