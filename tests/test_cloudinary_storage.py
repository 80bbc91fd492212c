import logging

import cloudinary.exceptions
import pytest

from app.core.exceptions import RemoteProviderError
from app.services.cloudinary_storage import CloudinaryStorage, resource_type_for


@pytest.fixture
def storage():
    return CloudinaryStorage(cloud_name="demo-cloud", api_key="key", api_secret="secret", folder="uploads")


def test_resource_type_routing():
    assert resource_type_for("video/mp4") == "video"
    assert resource_type_for("image/png") == "image"
    assert resource_type_for("application/pdf") == "raw"
    assert resource_type_for("audio/mpeg") == "raw"


def test_configured_follows_cloud_name():
    assert CloudinaryStorage("demo-cloud", "key", "secret").configured is True
    assert CloudinaryStorage("", "", "").configured is False


def test_upload_passes_routing_options(storage, monkeypatch):
    calls = []

    def fake_upload(file, **options):
        calls.append((file.read(), options))
        return {"public_id": "uploads/clip_abc", "resource_type": "video"}

    monkeypatch.setattr("cloudinary.uploader.upload", fake_upload)

    result = storage.upload(b"frames", "clip.mp4", "video/mp4")

    assert result["public_id"] == "uploads/clip_abc"
    assert calls == [
        (
            b"frames",
            {
                "resource_type": "video",
                "folder": "uploads",
                "use_filename": True,
                "unique_filename": True,
                "filename": "clip.mp4",
            },
        )
    ]


def test_upload_failure_raises_provider_error(storage, monkeypatch, caplog):
    def fake_upload(file, **options):
        raise cloudinary.exceptions.Error("Invalid Signature")

    monkeypatch.setattr("cloudinary.uploader.upload", fake_upload)

    with pytest.raises(RemoteProviderError) as excinfo:
        storage.upload(b"x", "a.png", "image/png")

    assert excinfo.value.message == "Upload failed"
    assert excinfo.value.error == "Invalid Signature"
    assert excinfo.value.status_code == 500
    assert "event=upload_failure" in caplog.text


def test_destroy_uses_resource_type(storage, monkeypatch):
    calls = []

    def fake_destroy(public_id, **options):
        calls.append((public_id, options))
        return {"result": "ok"}

    monkeypatch.setattr("cloudinary.uploader.destroy", fake_destroy)

    assert storage.destroy("uploads/doc", resource_type="raw") == {"result": "ok"}
    assert calls == [("uploads/doc", {"resource_type": "raw"})]


def test_destroy_not_found_is_logged_not_raised(storage, monkeypatch, caplog):
    monkeypatch.setattr("cloudinary.uploader.destroy", lambda public_id, **options: {"result": "not found"})

    with caplog.at_level(logging.WARNING, logger="media_uploader.storage"):
        result = storage.destroy("uploads/gone")

    assert result == {"result": "not found"}
    assert "destroy_unexpected_result" in caplog.text


def test_destroy_failure_raises_provider_error(storage, monkeypatch, caplog):
    def fake_destroy(public_id, **options):
        raise cloudinary.exceptions.Error("Request timed out")

    monkeypatch.setattr("cloudinary.uploader.destroy", fake_destroy)

    with pytest.raises(RemoteProviderError) as excinfo:
        storage.destroy("uploads/a")

    assert excinfo.value.message == "Delete failed"
    assert excinfo.value.error == "Request timed out"
    assert "event=delete_failure" in caplog.text
