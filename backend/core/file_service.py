import os
import uuid
from typing import Optional

from fastapi import UploadFile, status
import logging

from .config import settings
from .exceptions import APIError, ValidationError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}


def format_file_size(size_bytes: int) -> str:
    """Format file size in human readable format."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} TB"


class FileService:
    """Stores uploads under the uploads directory, served back at ``/uploads``."""

    def __init__(
        self,
        base_dir: Optional[str] = None,
        max_file_size: Optional[int] = None,
        allowed_extensions: Optional[set] = None,
    ):
        self.base_dir = base_dir or settings.uploads_dir
        self.max_file_size = max_file_size or settings.max_upload_size_bytes
        self.allowed_extensions = allowed_extensions or IMAGE_EXTENSIONS

    def _extension(self, file: UploadFile) -> str:
        if not file.filename or "." not in file.filename:
            raise ValidationError("File name must have an extension")
        extension = file.filename.rsplit(".", 1)[-1].lower()
        if extension not in self.allowed_extensions:
            raise ValidationError(
                f"File type '{extension}' not allowed. "
                f"Allowed: {', '.join(sorted(self.allowed_extensions))}"
            )
        return extension

    async def upload_file(self, file: UploadFile, folder: str) -> dict:
        extension = self._extension(file)
        content = await file.read()
        if not content:
            raise ValidationError("Uploaded file is empty")
        if len(content) > self.max_file_size:
            raise APIError(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File size exceeds maximum allowed size of "
                f"{format_file_size(self.max_file_size)}",
                error_code="FILE_TOO_LARGE",
            )

        relative_path = f"{folder}/{uuid.uuid4().hex}.{extension}"
        target = os.path.join(self.base_dir, *relative_path.split("/"))
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "wb") as handle:
            handle.write(content)

        logger.info(f"Stored upload {relative_path} ({format_file_size(len(content))})")
        return {
            "file_url": f"/uploads/{relative_path}",
            "file_name": file.filename,
            "file_type": file.content_type or "application/octet-stream",
            "file_size": len(content),
        }

    def delete_file(self, file_url: str) -> bool:
        if not file_url.startswith("/uploads/"):
            return False
        relative_path = file_url[len("/uploads/"):]
        target = os.path.join(self.base_dir, *relative_path.split("/"))
        try:
            os.remove(target)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"File delete error: {e}")
            return False


def get_file_service() -> FileService:
    return FileService()
