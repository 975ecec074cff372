"""Centralised configuration for the Employee Records service."""

from pathlib import Path

from settings import settings

# Postgres connection URL; empty means the store is not configured.
DATABASE_URL = settings.DATABASE_URL

# Profile images land here and are served back under /uploads.
UPLOAD_DIR = Path(settings.UPLOAD_DIR)
UPLOAD_URL_PREFIX = "/uploads"
MAX_UPLOAD_BYTES = settings.MAX_UPLOAD_BYTES
IMAGE_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

# Listing limits. Search text and every text filter share the same cap.
MAX_FILTER_LENGTH = 100
DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

SORTABLE_FIELDS = frozenset({"name", "age", "skills", "address", "designation", "createdAt"})
DEFAULT_SORT_FIELD = "createdAt"
