"""File handling service for verification photos and avatars."""
import io
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from app.config import settings

logger = logging.getLogger(__name__)

INTAKE_PHOTO_DIR = "intakes"
AVATAR_DIR = "avatars"

ALLOWED_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


class FileService:
    """Service for storing, resolving and deleting uploaded images."""

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir)

    def save_image(self, subdir: str, data: bytes, content_type: Optional[str]) -> str:
        """
        Verify and store an uploaded image.

        Args:
            subdir: Folder under the upload root ("intakes" or "avatars")
            data: Raw file contents
            content_type: MIME type reported by the client

        Returns:
            Relative path to saved file

        Raises:
            ValueError: If the type is not allowed or the bytes are not an image
        """
        if content_type not in ALLOWED_TYPES:
            raise ValueError(
                f"Invalid file type: {content_type}. Allowed: {sorted(ALLOWED_TYPES)}"
            )
        if not data:
            raise ValueError("Photo is empty")

        # Reject anything Pillow cannot parse as an image
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ValueError("Photo could not be read as an image") from e

        target_dir = self.upload_dir / subdir
        target_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
        unique_id = str(uuid.uuid4())[:8]
        filename = f"{timestamp}_{unique_id}{ALLOWED_TYPES[content_type]}"

        file_path = target_dir / filename
        with open(file_path, "wb") as f:
            f.write(data)

        return str(file_path)

    def delete_file(self, file_path: str) -> bool:
        """
        Delete a stored file.

        Returns:
            True if deleted, False if missing or the delete failed
        """
        try:
            path = Path(file_path)
            if path.exists():
                path.unlink()
                return True
            return False
        except OSError as e:
            logger.warning("Could not delete file %s: %s", file_path, e)
            return False

    def get_file_url(self, file_path: Optional[str]) -> Optional[str]:
        """Convert a stored path to the URL it is served under."""
        if not file_path:
            return None
        path = Path(file_path)
        try:
            relative = path.relative_to(self.upload_dir)
        except ValueError:
            relative = Path(path.name)
        return f"/uploads/{relative.as_posix()}"


# Singleton instance
file_service = FileService()
