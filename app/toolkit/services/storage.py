"""
Object storage backed by Django's default file storage.

The configured STORAGES["default"] backend decides where bytes land
(filesystem locally, S3-compatible buckets in production, in-memory in
tests).
"""

from __future__ import annotations

import logging

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)


class DefaultStorageBackend:
    """Implements toolkit.protocols.ObjectStorage."""

    def __init__(self, storage=None):
        self.storage = storage or default_storage

    def store(self, content: bytes, key: str) -> str:
        """Write content under key, replacing any previous object."""
        if self.storage.exists(key):
            self.storage.delete(key)
        saved_key = self.storage.save(key, ContentFile(content))
        logger.info(f"Stored object {saved_key} ({len(content)} bytes)")
        return self.storage.url(saved_key)
