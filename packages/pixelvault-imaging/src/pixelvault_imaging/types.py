from abc import abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

import numpy as np

# Decoded image as held by a backend; the generator only passes it back
RasterImage = Any


class ImagingError(Exception):
    pass


class DecodeError(ImagingError):
    """Raised when input bytes are not a recognizable raster image."""


class EncodeError(ImagingError):
    """Raised when a derivative cannot be produced from the source bytes."""


class InvalidIdentifierError(ValueError):
    pass


class WebPMode(str, Enum):
    THUMBNAIL = "thumbnail"
    FULL = "full"


class DownloadFormat(str, Enum):
    PNG = "png"
    JPEG = "jpeg"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"


@dataclass(frozen=True)
class ImageInfo:
    width: int
    height: int
    mime_type: str
    # False when the container format was decodable but unmapped and the
    # image/jpeg default was applied
    mime_detected: bool = True


@dataclass(frozen=True)
class DerivativeSettings:
    thumbnail_size: int = 150
    thumbnail_quality: int = 85
    full_quality: int = 92
    full_max_size: int | None = None
    webp_method: int = 4
    placeholder_grid_size: int = 32
    placeholder_components_x: int = 4
    placeholder_components_y: int = 4
    jpeg_download_quality: int = 100
    png_compress_level: int = 6


@dataclass(frozen=True)
class ProcessedImage:
    blurhash: str
    thumbnail_webp: bytes
    image_webp: bytes
    original_image: bytes
    original_mime_type: str
    width: int
    height: int
    original_size: int


@runtime_checkable
class ImageBackend(Protocol):
    """Image library operations the derivative generator relies on.

    Images returned by one method are only ever handed back to the same
    backend, so implementations are free to choose their own image type.
    """

    @abstractmethod
    def probe(self, data: bytes) -> tuple[RasterImage, str | None]:
        """Decode bytes and return the image with its detected format name."""
        ...

    @abstractmethod
    def dimensions(self, image: RasterImage) -> tuple[int, int]: ...

    @abstractmethod
    def normalize(self, image: RasterImage) -> RasterImage:
        """Convert to 8-bit RGB, or RGBA when the source carries transparency."""
        ...

    @abstractmethod
    def flatten(
        self, image: RasterImage, background: tuple[int, int, int] = (255, 255, 255)
    ) -> RasterImage:
        """Composite any alpha onto a solid background, returning RGB."""
        ...

    @abstractmethod
    def rgb_pixels(self, image: RasterImage) -> np.ndarray:
        """Pixels as a height x width x 3 uint8 array."""
        ...

    @abstractmethod
    def resize_cover_fit(
        self, image: RasterImage, width: int, height: int
    ) -> RasterImage:
        """Scale and center-crop to exactly width x height."""
        ...

    @abstractmethod
    def resize_contain(self, image: RasterImage, max_dim: int) -> RasterImage:
        """Scale down to fit a max_dim square box, never enlarging."""
        ...

    @abstractmethod
    def encode(self, image: RasterImage, fmt: str, **options) -> bytes: ...

    @abstractmethod
    def release(self, image: RasterImage) -> None:
        """Free resources held by a probed image."""
        ...
