from __future__ import annotations

import threading
from dataclasses import replace
from typing import List, Optional, Tuple

from app.core.exceptions import NotFoundError
from app.models import FileRecord, StatsCounters

IMAGES = "images"
VIDEOS = "videos"
OTHERS = "others"

_BUCKET_FIELDS = {
    IMAGES: "total_images",
    VIDEOS: "total_videos",
    OTHERS: "total_others",
}


def stats_bucket(content_type: str) -> str:
    """Return the statistics bucket a MIME type is counted under."""
    content_type = content_type or ""
    if content_type.startswith("image/"):
        return IMAGES
    if content_type.startswith("video/"):
        return VIDEOS
    return OTHERS


class FileRegistry:
    """Thread-safe in-memory index of uploaded files and their counters.

    Records are kept newest first. Nothing is persisted: a new process starts
    with an empty registry.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._files: List[FileRecord] = []
        self._stats = StatsCounters()

    def list(self) -> Tuple[List[FileRecord], StatsCounters]:
        with self._lock:
            return list(self._files), replace(self._stats)

    def stats(self) -> StatsCounters:
        with self._lock:
            return replace(self._stats)

    def get(self, file_id: str) -> Optional[FileRecord]:
        with self._lock:
            index = self._index_of(file_id)
            return self._files[index] if index is not None else None

    def insert(self, record: FileRecord) -> StatsCounters:
        with self._lock:
            # A reused public id replaces the previous entry.
            existing = self._index_of(record.id)
            if existing is not None:
                self._discard(existing)
            self._files.insert(0, record)
            self._adjust(record, 1)
            return replace(self._stats)

    def remove(self, file_id: str) -> StatsCounters:
        with self._lock:
            index = self._index_of(file_id)
            if index is None:
                raise NotFoundError("File not found")
            self._discard(index)
            return replace(self._stats)

    def __len__(self) -> int:
        with self._lock:
            return len(self._files)

    def _index_of(self, file_id: str) -> Optional[int]:
        for index, record in enumerate(self._files):
            if record.id == file_id:
                return index
        return None

    def _discard(self, index: int) -> None:
        record = self._files.pop(index)
        self._adjust(record, -1)

    def _adjust(self, record: FileRecord, delta: int) -> None:
        bucket_field = _BUCKET_FIELDS[stats_bucket(record.type)]
        self._stats.total_uploads += delta
        setattr(self._stats, bucket_field, getattr(self._stats, bucket_field) + delta)
