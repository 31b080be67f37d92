import asyncio

import blurhash

from .pillow_backend import PillowBackend
from .types import (
    DecodeError,
    DerivativeSettings,
    DownloadFormat,
    EncodeError,
    ImageBackend,
    ImageInfo,
    ProcessedImage,
    RasterImage,
    WebPMode,
)

DEFAULT_MIME_TYPE = "image/jpeg"

FORMAT_MIME_TYPES = {
    "JPEG": "image/jpeg",
    "MPO": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "TIFF": "image/tiff",
    "BMP": "image/bmp",
}

MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/tiff": "tiff",
    "image/bmp": "bmp",
}

# Originals in these formats may carry transparency, so downloads stay lossless
_PNG_DOWNLOAD_SOURCES = {"image/png", "image/gif", "image/webp", "image/tiff"}


def mime_type_for_format(image_format: str | None) -> tuple[str, bool]:
    """Map a decoder format name to a MIME type, flagging the jpeg fallback."""
    if image_format and image_format.upper() in FORMAT_MIME_TYPES:
        return FORMAT_MIME_TYPES[image_format.upper()], True
    return DEFAULT_MIME_TYPE, False


def extension_for_mime_type(mime_type: str | None) -> str:
    return MIME_EXTENSIONS.get((mime_type or DEFAULT_MIME_TYPE).lower(), "jpg")


def download_format_for(mime_type: str | None) -> DownloadFormat:
    if mime_type and mime_type.lower() in _PNG_DOWNLOAD_SOURCES:
        return DownloadFormat.PNG
    return DownloadFormat.JPEG


class DerivativeGenerator:
    def __init__(
        self,
        settings: DerivativeSettings | None = None,
        backend: ImageBackend | None = None,
    ):
        self.settings = settings or DerivativeSettings()
        self.backend = backend or PillowBackend()

    def inspect(self, data: bytes) -> ImageInfo:
        image, image_format = self.backend.probe(data)
        try:
            width, height = self.backend.dimensions(image)
        finally:
            self.backend.release(image)

        mime_type, detected = mime_type_for_format(image_format)
        return ImageInfo(
            width=width,
            height=height,
            mime_type=mime_type,
            mime_detected=detected,
        )

    def generate_placeholder(self, data: bytes) -> str:
        grid = self.settings.placeholder_grid_size
        image, _ = self.backend.probe(data)

        try:
            small = self.backend.resize_cover_fit(
                self.backend.normalize(image), grid, grid
            )
            pixels = self.backend.rgb_pixels(small)
            return blurhash.encode(
                pixels,
                components_x=self.settings.placeholder_components_x,
                components_y=self.settings.placeholder_components_y,
            )
        except (OSError, ValueError) as e:
            raise EncodeError(f"Failed to generate placeholder: {e}") from e
        finally:
            self.backend.release(image)

    def to_webp(
        self,
        data: bytes,
        mode: WebPMode = WebPMode.FULL,
        max_size: int | None = None,
    ) -> bytes:
        mode = WebPMode(mode)
        image = self._load_source(data)

        try:
            try:
                working = self.backend.normalize(image)
                if mode is WebPMode.THUMBNAIL:
                    size = self.settings.thumbnail_size
                    working = self.backend.resize_cover_fit(working, size, size)
                    quality = self.settings.thumbnail_quality
                else:
                    bound = max_size if max_size is not None else self.settings.full_max_size
                    if bound:
                        working = self.backend.resize_contain(working, bound)
                    quality = self.settings.full_quality
            except (OSError, ValueError) as e:
                raise EncodeError(
                    f"Failed to prepare {mode.value} rendition: {e}"
                ) from e

            return self.backend.encode(
                working, "WEBP", quality=quality, method=self.settings.webp_method
            )
        finally:
            self.backend.release(image)

    def resize_lossless(
        self,
        data: bytes,
        width: int,
        height: int,
        fmt: DownloadFormat = DownloadFormat.JPEG,
    ) -> bytes:
        if width <= 0 or height <= 0:
            raise ValueError(f"Target size must be positive, got {width}x{height}")

        fmt = DownloadFormat(fmt)
        image = self._load_source(data)

        try:
            try:
                # Cover-fit enlarges small sources: exact preset size wins
                resized = self.backend.resize_cover_fit(
                    self.backend.normalize(image), width, height
                )
                if fmt is DownloadFormat.JPEG:
                    resized = self.backend.flatten(resized)
            except (OSError, ValueError) as e:
                raise EncodeError(f"Failed to resize to {width}x{height}: {e}") from e

            if fmt is DownloadFormat.PNG:
                return self.backend.encode(
                    resized, "PNG", compress_level=self.settings.png_compress_level
                )

            return self.backend.encode(
                resized,
                "JPEG",
                quality=self.settings.jpeg_download_quality,
                subsampling=0,
                optimize=True,
            )
        finally:
            self.backend.release(image)

    async def ingest(self, data: bytes) -> ProcessedImage:
        info = await asyncio.to_thread(self.inspect, data)

        # The three derivatives only read the input bytes; the first failure
        # propagates and the remaining results are discarded
        placeholder, thumbnail, full = await asyncio.gather(
            asyncio.to_thread(self.generate_placeholder, data),
            asyncio.to_thread(self.to_webp, data, WebPMode.THUMBNAIL),
            asyncio.to_thread(self.to_webp, data, WebPMode.FULL),
        )

        return ProcessedImage(
            blurhash=placeholder,
            thumbnail_webp=thumbnail,
            image_webp=full,
            original_image=data,
            original_mime_type=info.mime_type,
            width=info.width,
            height=info.height,
            original_size=len(data),
        )

    def _load_source(self, data: bytes) -> RasterImage:
        try:
            image, _ = self.backend.probe(data)
        except DecodeError as e:
            raise EncodeError(f"Cannot decode source image: {e}") from e
        return image
