from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class FileRecord:
    """Metadata for one file stored at the media provider."""

    id: str
    name: str
    type: str
    size: int
    url: str
    thumbnail: Optional[str] = None
    format: Optional[str] = None
    resource_type: Optional[str] = None
    timestamp: str = field(default_factory=_utc_timestamp)

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError("size must be non-negative")
        if not self.thumbnail:
            self.thumbnail = self.url

    @classmethod
    def from_upload(cls, result: Dict[str, Any], name: str, content_type: str, size: int) -> "FileRecord":
        """Build a record from a provider upload response."""
        url = result.get("secure_url") or result.get("url") or ""
        return cls(
            id=result["public_id"],
            name=name,
            type=content_type,
            size=size,
            url=url,
            thumbnail=result.get("thumbnail_url") or url,
            format=result.get("format"),
            resource_type=result.get("resource_type"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "url": self.url,
            "thumbnail": self.thumbnail,
            "timestamp": self.timestamp,
            "format": self.format,
            "resourceType": self.resource_type,
        }


@dataclass
class StatsCounters:
    total_uploads: int = 0
    total_images: int = 0
    total_videos: int = 0
    total_others: int = 0

    @property
    def consistent(self) -> bool:
        return self.total_uploads == self.total_images + self.total_videos + self.total_others

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalUploads": self.total_uploads,
            "totalImages": self.total_images,
            "totalVideos": self.total_videos,
            "totalOthers": self.total_others,
        }
