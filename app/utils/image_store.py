# app/utils/image_store.py

import hashlib
import io
import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional, Union

from PIL import Image

from app.core.config import settings
from app.core.exceptions import (
    BadInput,
    CatalogException,
    InvalidName,
    IOFailure,
    SourceUnreadable,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
DEFAULT_IMAGE_SIZE = (200, 200)
DEFAULT_IMAGE_COLOR = (224, 224, 224)

ImageSource = Union[bytes, bytearray, memoryview, BinaryIO]


class ImageStore:
    """Content-addressed image storage keyed by the SHA-256 of the image bytes."""

    def __init__(
        self,
        image_dir: Union[str, Path] = "images",
        extension: str = ".jpg",
        default_name: str = "default.jpg",
        max_size: Optional[int] = None,
    ):
        """
        Initialize the image store.

        Args:
            image_dir: Directory holding stored images and the default image
            extension: Suffix appended to every digest-derived filename
            default_name: Reserved filename of the fallback image
            max_size: Upper bound on accepted image size in bytes (None for no limit)
        """
        self.image_dir = Path(image_dir)
        self.extension = extension
        self.default_name = default_name
        self.max_size = max_size

    def _ensure_directory(self) -> None:
        """Create the image directory if it doesn't exist."""
        try:
            self.image_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailure(
                f"Cannot create image directory {self.image_dir}: {e}", stage="image"
            ) from e

    def is_reserved(self, filename: str) -> bool:
        return filename == self.default_name

    def put(self, source: ImageSource) -> str:
        """
        Store image bytes under their content digest.

        The whole source is read and spooled to a temporary file in the image
        directory first; only then is it renamed to ``<sha256-hex><extension>``.
        Storing identical bytes again rewrites the same name with the same
        content.

        Args:
            source: Raw bytes or a readable binary stream

        Returns:
            The stored filename

        Raises:
            BadInput: If the source is empty or exceeds ``max_size``
            SourceUnreadable: If the source cannot be read to the end
            IOFailure: If the image cannot be written
        """
        if isinstance(source, (bytes, bytearray, memoryview)):
            stream = io.BytesIO(source)
        elif hasattr(source, "read"):
            stream = source
        else:
            raise BadInput("Image must be bytes or a binary stream", stage="image")

        self._ensure_directory()

        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.image_dir, prefix=".upload-", suffix=".tmp"
            )
        except OSError as e:
            raise IOFailure(f"Cannot create temporary image file: {e}", stage="image") from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as tmp:
                digest, size = self._spool(stream, tmp)

            if size == 0:
                raise BadInput("Empty image uploaded", stage="image")

            filename = f"{digest}{self.extension}"
            os.replace(tmp_path, self.image_dir / filename)
        except CatalogException:
            raise
        except OSError as e:
            raise IOFailure(f"Cannot write image file: {e}", stage="image") from e
        finally:
            tmp_path.unlink(missing_ok=True)

        logger.debug(f"Stored image {filename} ({size} bytes)")
        return filename

    def _spool(self, stream: BinaryIO, out: BinaryIO) -> tuple[str, int]:
        """Copy ``stream`` into ``out`` chunk by chunk, returning (hex digest, size)."""
        digest = hashlib.sha256()
        size = 0
        while True:
            try:
                chunk = stream.read(CHUNK_SIZE)
            except (OSError, ValueError) as e:
                raise SourceUnreadable(f"Failed to read image: {e}", stage="image") from e
            if not chunk:
                break

            size += len(chunk)
            if self.max_size is not None and size > self.max_size:
                raise BadInput(
                    f"Image exceeds maximum allowed size of {self.max_size / (1024 * 1024)}MB",
                    stage="image",
                )

            digest.update(chunk)
            out.write(chunk)
        return digest.hexdigest(), size

    def validate_name(self, filename: str) -> None:
        """
        Check that ``filename`` is a plain image filename inside the store.

        Raises:
            InvalidName: If the suffix is wrong or the name could escape the directory
        """
        if not filename.endswith(self.extension):
            raise InvalidName(f"Image path does not end with {self.extension}")

        if (
            Path(filename).name != filename
            or "/" in filename
            or "\\" in filename
            or filename.startswith(".")
        ):
            raise InvalidName("Image path must be a plain file name")

    def get(self, filename: str) -> Path:
        """
        Resolve a stored image, falling back to the default image.

        Args:
            filename: Name previously returned by ``put``

        Returns:
            Path of the stored image, or of the default image if it is absent

        Raises:
            InvalidName: If the filename fails ``validate_name``
        """
        self.validate_name(filename)

        path = self.image_dir / filename
        if not path.is_file():
            logger.debug(f"Image not found: {path}")
            return self.default_path()
        return path

    def default_path(self) -> Path:
        self.ensure_default()
        return self.image_dir / self.default_name

    def ensure_default(self) -> None:
        """Render the placeholder default image if it is missing."""
        path = self.image_dir / self.default_name
        if path.is_file():
            return

        self._ensure_directory()
        buffer = io.BytesIO()
        Image.new("RGB", DEFAULT_IMAGE_SIZE, color=DEFAULT_IMAGE_COLOR).save(
            buffer, format="JPEG"
        )

        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.image_dir, prefix=".default-", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(buffer.getvalue())
            os.replace(tmp_name, path)
        except OSError as e:
            raise IOFailure(f"Cannot write default image: {e}", stage="image") from e

        logger.info(f"Default image created at {path}")


def build_image_store() -> ImageStore:
    return ImageStore(
        image_dir=settings.image_dir,
        extension=settings.image_extension,
        default_name=settings.default_image_name,
        max_size=settings.max_image_size,
    )


# Create a singleton instance
image_store = build_image_store()


def get_image_store() -> ImageStore:
    """Dependency for FastAPI"""
    return image_store
