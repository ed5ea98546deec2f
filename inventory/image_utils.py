"""Image utilities for product uploads.

Turns a picked image file into the multipart part sent to the API.
"""

import mimetypes
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple

from inventory.config import DEFAULT_IMAGE_CONTENT_TYPE, MAX_IMAGE_SIZE
from inventory.logging_config import log_client_event

__all__ = [
    "ImageError",
    "ImagePart",
    "guess_image_content_type",
    "load_image_part",
    "MAX_IMAGE_SIZE",
]

# Register HEIF/HEIC support for Pillow (phone cameras)
try:
    from pillow_heif import register_heif_opener
    register_heif_opener()
except ImportError:
    pass  # pillow-heif not installed, HEIC sniffing disabled


class ImageError(ValueError):
    """Raised when a picked image cannot be uploaded."""
    pass


@dataclass
class ImagePart:
    """A file ready to be sent as the ``image`` multipart field."""

    filename: str
    content: bytes
    content_type: str

    def as_requests_file(self) -> Tuple[str, bytes, str]:
        return (self.filename, self.content, self.content_type)


def _sniff_content_type(content: bytes) -> Optional[str]:
    """Identify image bytes with Pillow, returning a MIME type or None."""
    try:
        from PIL import Image

        with Image.open(BytesIO(content)) as img:
            return Image.MIME.get(img.format or "")
    except Exception as e:
        log_client_event("image_sniff_failed", {"error": str(e)})
        return None


def guess_image_content_type(filename: str, content: Optional[bytes] = None) -> str:
    """Derive the content type for an image file.

    The extension decides first. With a missing or unrecognized extension
    the bytes are sniffed, and if that fails too the generic binary type is
    used.

    Args:
        filename: File name as it will be sent
        content: Raw file bytes, used only when the extension is inconclusive

    Returns:
        MIME type string
    """
    guessed, _ = mimetypes.guess_type(filename, strict=False)
    if guessed and guessed.startswith("image/"):
        return guessed

    if content:
        sniffed = _sniff_content_type(content)
        if sniffed:
            return sniffed

    return DEFAULT_IMAGE_CONTENT_TYPE


def load_image_part(path: str) -> ImagePart:
    """Read a local image file into an ImagePart.

    Args:
        path: Local file path of the picked image

    Returns:
        ImagePart with filename, bytes and content type

    Raises:
        ImageError: If the file is missing, empty or larger than 5MB
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ImageError(f"Image file not found: {path}")

    size = file_path.stat().st_size
    if size == 0:
        raise ImageError(f"Image file is empty: {path}")
    if size > MAX_IMAGE_SIZE:
        size_mb = size / (1024 * 1024)
        raise ImageError(
            f"Image too large ({size_mb:.1f}MB). Please use an image smaller than 5MB."
        )

    content = file_path.read_bytes()
    return ImagePart(
        filename=file_path.name,
        content=content,
        content_type=guess_image_content_type(file_path.name, content),
    )
