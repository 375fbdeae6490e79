"""
Unit tests for FileService.

Tests file handling including:
- File type and content validation
- Storage layout and URLs
- Safe file deletion
"""
import os
import tempfile
from pathlib import Path

import pytest

from app.services.file_service import AVATAR_DIR, INTAKE_PHOTO_DIR, FileService
from tests.factories import make_image_bytes


class TestFileServiceInit:
    """Tests for FileService initialization."""

    def test_uses_default_directory(self):
        """Test that default directory comes from settings."""
        service = FileService()

        assert service.upload_dir == Path("uploads")

    def test_directory_created_lazily(self):
        """Subdirectories are created on first save."""
        with tempfile.TemporaryDirectory() as tmpdir:
            service = FileService(upload_dir=tmpdir)
            assert not os.path.exists(os.path.join(tmpdir, INTAKE_PHOTO_DIR))

            service.save_image(INTAKE_PHOTO_DIR, make_image_bytes(), "image/png")

            assert os.path.isdir(os.path.join(tmpdir, INTAKE_PHOTO_DIR))


class TestFileTypeValidation:
    """Tests for file type validation."""

    @pytest.mark.parametrize(
        "fmt,content_type,ext",
        [
            ("JPEG", "image/jpeg", ".jpg"),
            ("JPEG", "image/jpg", ".jpg"),
            ("PNG", "image/png", ".png"),
            ("WEBP", "image/webp", ".webp"),
        ],
    )
    def test_accepts_allowed_types(self, tmp_path, fmt, content_type, ext):
        service = FileService(upload_dir=str(tmp_path))

        path = service.save_image(INTAKE_PHOTO_DIR, make_image_bytes(fmt), content_type)

        assert path.endswith(ext)
        assert os.path.exists(path)

    @pytest.mark.parametrize("content_type", ["application/pdf", "text/plain", None])
    def test_rejects_invalid_type(self, tmp_path, content_type):
        service = FileService(upload_dir=str(tmp_path))

        with pytest.raises(ValueError, match="Invalid file type"):
            service.save_image(INTAKE_PHOTO_DIR, make_image_bytes(), content_type)

    def test_rejects_empty(self, tmp_path):
        service = FileService(upload_dir=str(tmp_path))

        with pytest.raises(ValueError, match="empty"):
            service.save_image(INTAKE_PHOTO_DIR, b"", "image/png")

    def test_rejects_corrupt_image(self, tmp_path):
        """Bytes that claim to be PNG but are not are rejected."""
        service = FileService(upload_dir=str(tmp_path))

        with pytest.raises(ValueError, match="could not be read"):
            service.save_image(INTAKE_PHOTO_DIR, b"\x89PNG garbage", "image/png")

        assert not (tmp_path / INTAKE_PHOTO_DIR).exists()


class TestFileSaving:
    """Tests for file saving."""

    def test_unique_filenames(self, tmp_path):
        service = FileService(upload_dir=str(tmp_path))

        first = service.save_image(AVATAR_DIR, make_image_bytes(), "image/png")
        second = service.save_image(AVATAR_DIR, make_image_bytes(), "image/png")

        assert first != second

    def test_saved_bytes_match(self, tmp_path):
        service = FileService(upload_dir=str(tmp_path))
        data = make_image_bytes()

        path = service.save_image(AVATAR_DIR, data, "image/png")

        with open(path, "rb") as f:
            assert f.read() == data


class TestFileUrls:

    def test_url_relative_to_upload_dir(self, tmp_path):
        service = FileService(upload_dir=str(tmp_path))
        path = service.save_image(INTAKE_PHOTO_DIR, make_image_bytes(), "image/png")

        url = service.get_file_url(path)

        assert url == f"/uploads/{INTAKE_PHOTO_DIR}/{os.path.basename(path)}"

    def test_url_for_foreign_path_uses_filename(self, tmp_path):
        service = FileService(upload_dir=str(tmp_path))

        assert service.get_file_url("/elsewhere/photo.jpg") == "/uploads/photo.jpg"

    def test_no_path_no_url(self, tmp_path):
        service = FileService(upload_dir=str(tmp_path))

        assert service.get_file_url(None) is None
        assert service.get_file_url("") is None


class TestFileDeletion:
    """Tests for safe file deletion."""

    def test_deletes_existing_file(self, tmp_path):
        service = FileService(upload_dir=str(tmp_path))
        path = service.save_image(INTAKE_PHOTO_DIR, make_image_bytes(), "image/png")

        assert service.delete_file(path) is True
        assert not os.path.exists(path)

    def test_missing_file_returns_false(self, tmp_path):
        service = FileService(upload_dir=str(tmp_path))

        assert service.delete_file(str(tmp_path / "missing.png")) is False
