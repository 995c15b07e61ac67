"""Object storage for uploaded video files."""

import logging
import secrets
import time
from pathlib import Path, PurePosixPath

from ..config import settings
from ..domain.exceptions import StorageError, ValidationFailedError

logger = logging.getLogger(__name__)


class StorageService:
    """Local-filesystem object store with public URLs.

    Objects are addressed by a relative POSIX storage path such as
    ``videos/<project_id>/<name>.mp4`` and served back at
    ``<public_base_url>/<storage_path>``.
    """

    def __init__(
        self,
        root_dir: str | None = None,
        public_base_url: str | None = None,
        max_upload_bytes: int | None = None,
        allowed_types: tuple[str, ...] | None = None,
    ):
        self.root_dir = Path(root_dir or settings.STORAGE_DIR).resolve()
        self.public_base_url = (public_base_url or settings.PUBLIC_MEDIA_BASE_URL).rstrip(
            "/"
        )
        self.max_upload_bytes = max_upload_bytes or settings.MAX_UPLOAD_BYTES
        self.allowed_types = allowed_types or settings.ALLOWED_VIDEO_TYPES

    def validate_upload(self, filename: str | None, content_type: str | None, size: int):
        """Reject uploads before anything is written.

        Raises:
            ValidationFailedError: If the file is missing, too large, or of an
                unsupported type
        """
        if not filename or size == 0:
            raise ValidationFailedError("file", "No file provided")
        if size > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            raise ValidationFailedError(
                "file", f"File size must be less than {limit_mb}MB"
            )
        if content_type not in self.allowed_types:
            raise ValidationFailedError(
                "file", "File type not supported. Please use MP4, MOV, AVI, or WebM"
            )

    def build_storage_path(self, project_id: str, filename: str) -> str:
        """Generate a unique storage path for an upload."""
        extension = PurePosixPath(filename).suffix.lstrip(".").lower() or "bin"
        name = f"{int(time.time() * 1000)}_{secrets.token_hex(6)}.{extension}"
        return f"videos/{project_id}/{name}"

    def project_id_of(self, storage_path: str) -> str | None:
        """Get the project a storage path lives under, if it is well formed.

        Only ``videos/<project_id>/<name>`` paths qualify.
        """
        parts = PurePosixPath(storage_path).parts
        if len(parts) < 3 or parts[0] != "videos" or ".." in parts:
            return None
        return parts[1]

    def resolve(self, storage_path: str) -> Path:
        """Map a storage path to a file under the storage root.

        Raises:
            ValidationFailedError: If the path escapes the storage root
        """
        candidate = (self.root_dir / storage_path).resolve()
        if not candidate.is_relative_to(self.root_dir):
            raise ValidationFailedError("storage_path", "Invalid storage path")
        return candidate

    def upload(self, storage_path: str, data: bytes) -> str:
        """Write an object and return its storage path.

        Raises:
            StorageError: If the file cannot be written
        """
        target = self.resolve(storage_path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            logger.error(f"Error uploading file to {storage_path}: {e}")
            raise StorageError("Failed to upload file") from e

        logger.info(f"Stored {len(data)} bytes at {storage_path}")
        return storage_path

    def public_url(self, storage_path: str) -> str:
        """Get the publicly reachable URL of an object."""
        return f"{self.public_base_url}/{storage_path.lstrip('/')}"

    def delete(self, storage_path: str) -> bool:
        """Delete an object, tolerating failures.

        Returns:
            True if a file was removed, False if it was missing or could not
            be removed
        """
        try:
            target = self.resolve(storage_path)
            target.unlink()
            return True
        except FileNotFoundError:
            logger.warning(f"File already absent from storage: {storage_path}")
            return False
        except (OSError, ValidationFailedError) as e:
            logger.error(f"Error deleting file from storage {storage_path}: {e}")
            return False
