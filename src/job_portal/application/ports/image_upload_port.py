"""Port for uploading account images to an external object-storage service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class FileAttachment:
    """Binary attachment received with a request."""

    content: bytes
    filename: str
    content_type: str | None = None


@dataclass(frozen=True)
class UploadOptions:
    """Per-upload handling hints passed to the storage service."""

    resource_type: str = "image"
    folder: str | None = None
    normalize_format: str | None = None
    multi_page: bool = False


@dataclass(frozen=True)
class UploadedImage:
    """Durable location of an uploaded file."""

    url: str


class ImageUploadError(RuntimeError):
    """Raised for normalized upload adapter failures."""


class ImageUploadPort(Protocol):
    """Image upload contract."""

    async def upload(
        self,
        attachment: FileAttachment,
        *,
        options: UploadOptions | None = None,
    ) -> UploadedImage:
        """Upload attachment bytes and return its durable URL."""
