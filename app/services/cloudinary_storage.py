from __future__ import annotations

import io
import logging
from typing import Any, Dict

from app.core.exceptions import RemoteProviderError

logger = logging.getLogger("media_uploader.storage")


def resource_type_for(content_type: str) -> str:
    """Pick the Cloudinary resource type an upload is routed to.

    This is independent of the statistics bucket: anything that is neither
    an image nor a video goes to the provider as ``raw``.
    """
    content_type = content_type or ""
    if content_type.startswith("video/"):
        return "video"
    if content_type.startswith("image/"):
        return "image"
    return "raw"


class CloudinaryStorage:
    """A thin wrapper around the Cloudinary SDK used to upload/destroy media."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: str = "uploads"):
        try:
            import cloudinary
        except ImportError as exc:  # pragma: no cover - dependency missing
            raise RuntimeError(
                "cloudinary is not installed. Install it via 'pip install cloudinary'."
            ) from exc

        # Empty values are skipped so a CLOUDINARY_URL picked up by the SDK still applies.
        credentials = {"cloud_name": cloud_name, "api_key": api_key, "api_secret": api_secret}
        cloudinary.config(secure=True, **{key: value for key, value in credentials.items() if value})
        self._folder = folder
        self._cloud_name = cloud_name

    @property
    def configured(self) -> bool:
        return bool(self._cloud_name)

    def upload(self, data: bytes, filename: str, content_type: str) -> Dict[str, Any]:
        """Upload raw bytes and return the provider's result payload."""
        import cloudinary.uploader

        resource_type = resource_type_for(content_type)
        try:
            return cloudinary.uploader.upload(
                io.BytesIO(data),
                resource_type=resource_type,
                folder=self._folder,
                use_filename=True,
                unique_filename=True,
                filename=filename,
            )
        except Exception as exc:
            logger.error(
                "event=upload_failure filename=%s resource_type=%s error=%s",
                filename,
                resource_type,
                exc,
            )
            raise RemoteProviderError("Upload failed", error=str(exc)) from exc

    def destroy(self, public_id: str, resource_type: str = "image") -> Dict[str, Any]:
        """Delete a stored asset by its public id."""
        import cloudinary.uploader

        try:
            result = cloudinary.uploader.destroy(public_id, resource_type=resource_type)
        except Exception as exc:
            logger.error(
                "event=delete_failure public_id=%s resource_type=%s error=%s",
                public_id,
                resource_type,
                exc,
            )
            raise RemoteProviderError("Delete failed", error=str(exc)) from exc

        outcome = result.get("result") if isinstance(result, dict) else None
        if outcome != "ok":
            # "not found" means the provider holds no copy; the caller still drops the record.
            logger.warning(
                "event=destroy_unexpected_result public_id=%s result=%s",
                public_id,
                outcome,
            )
        return result
