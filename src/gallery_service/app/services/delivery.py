import asyncio
import hashlib

from loguru import logger
from pixelvault_imaging import (
    INVALID,
    DEFAULT_MIME_TYPE,
    DerivativeGenerator,
    EncodeError,
    IdentifierCodec,
    ResolvedIdentifier,
    download_format_for,
    extension_for_mime_type,
)

from ..core.config import Settings
from ..core.exceptions import (
    AuthenticationRequired,
    DataUnavailable,
    ImageNotFound,
    InvalidIdentifier,
    RenditionFailed,
    UnknownPreset,
)
from ..models import Image as ImageModel
from .domain import DownloadPreset, Rendition, RenditionPayload
from .image_store import ImageStore

WEBP_MIME_TYPE = "image/webp"


def compute_etag(content: bytes) -> str:
    return f'"{hashlib.md5(content, usedforsecurity=False).hexdigest()}"'


class ImageDeliveryService:
    """Turns an external image id plus a rendition into bytes and headers.

    Steps run in a fixed order so each failure maps to one status: id
    resolution (400), session check for protected renditions (401), record
    lookup (404), then selecting or computing the bytes (500 on failure).
    """

    def __init__(
        self,
        codec: IdentifierCodec | None = None,
        generator: DerivativeGenerator | None = None,
        image_store: ImageStore | None = None,
        settings: Settings = None,
    ):
        from ..core.config import get_settings

        self.settings = settings or get_settings()
        self.codec = codec or IdentifierCodec(
            self.settings.HASHIDS_SALT, self.settings.HASHIDS_MIN_LENGTH
        )
        self.generator = generator or DerivativeGenerator(
            self.settings.derivative_settings
        )
        self.image_store = image_store or ImageStore()

    def resolve_id(self, raw_id: str) -> ResolvedIdentifier:
        resolved = self.codec.resolve(raw_id)
        if resolved is INVALID:
            raise InvalidIdentifier(raw_id)
        return resolved

    def public_id(self, image_id: int) -> str:
        return self.codec.encode(image_id)

    def get_preset(self, name: str) -> DownloadPreset:
        dimensions = self.settings.DOWNLOAD_PRESETS.get(name)
        if dimensions is None:
            raise UnknownPreset(name)
        width, height = dimensions
        return DownloadPreset(name=name, width=width, height=height)

    async def load_image(self, raw_id: str) -> ImageModel:
        resolved = self.resolve_id(raw_id)
        return await self._load_record(resolved)

    async def delete_image(self, raw_id: str, user_id: int | None) -> int:
        resolved = self.resolve_id(raw_id)
        if user_id is None:
            raise AuthenticationRequired("Authentication required")

        if not await self.image_store.soft_delete(resolved.id):
            raise ImageNotFound(resolved.id)

        logger.info(f"User {user_id} soft-deleted image {resolved.id}")
        return resolved.id

    async def get_rendition(
        self,
        raw_id: str,
        rendition: Rendition,
        user_id: int | None = None,
        preset_name: str | None = None,
    ) -> RenditionPayload:
        resolved = self.resolve_id(raw_id)

        if rendition.requires_session and user_id is None:
            logger.info(
                f"Anonymous request for {rendition.value} of image {resolved.id}"
            )
            raise AuthenticationRequired("Authentication required")

        preset = None
        if rendition is Rendition.RESIZED:
            preset = self.get_preset(preset_name or "")

        image_record = await self._load_record(resolved)
        public_id = self.public_id(image_record.id)

        if rendition is Rendition.THUMBNAIL:
            return self._payload(
                self._require(image_record, "thumbnail_data", rendition),
                WEBP_MIME_TYPE,
                f"image-{public_id}-thumbnail.webp",
                self.settings.PUBLIC_CACHE_CONTROL,
            )

        if rendition is Rendition.FULL:
            return self._payload(
                self._require(image_record, "image_data", rendition),
                WEBP_MIME_TYPE,
                f"image-{public_id}.webp",
                self.settings.PUBLIC_CACHE_CONTROL,
            )

        original = self._require(image_record, "original_data", rendition)
        original_mime_type = image_record.original_mime_type or DEFAULT_MIME_TYPE

        if rendition is Rendition.ORIGINAL:
            extension = extension_for_mime_type(original_mime_type)
            return self._payload(
                original,
                original_mime_type,
                f"image-{public_id}-original.{extension}",
                self.settings.PRIVATE_CACHE_CONTROL,
            )

        return await self._resized_payload(
            image_record.id, public_id, original, original_mime_type, preset
        )

    async def _resized_payload(
        self,
        image_id: int,
        public_id: str,
        original: bytes,
        original_mime_type: str,
        preset: DownloadPreset,
    ) -> RenditionPayload:
        fmt = download_format_for(original_mime_type)
        logger.info(
            f"Rendering {preset.label} {fmt.value} download for image {image_id}"
        )

        try:
            content = await asyncio.to_thread(
                self.generator.resize_lossless,
                original,
                preset.width,
                preset.height,
                fmt,
            )
        except EncodeError as e:
            logger.error(f"Failed to render {preset.label} for image {image_id}: {e}")
            raise RenditionFailed(str(e)) from e

        extension = extension_for_mime_type(fmt.mime_type)
        return self._payload(
            content,
            fmt.mime_type,
            f"image-{public_id}-{preset.label}.{extension}",
            self.settings.PRIVATE_CACHE_CONTROL,
        )

    async def _load_record(self, resolved: ResolvedIdentifier) -> ImageModel:
        image_record = await self.image_store.get_active(resolved.id)
        if image_record is None:
            logger.info(
                f"Image {resolved.id} not found (resolved via {resolved.source.value})"
            )
            raise ImageNotFound(resolved.id)
        return image_record

    @staticmethod
    def _require(image_record: ImageModel, field_name: str, rendition: Rendition) -> bytes:
        data = getattr(image_record, field_name)
        if not data:
            raise DataUnavailable(image_record.id, rendition.value)
        return bytes(data)

    @staticmethod
    def _payload(
        content: bytes, media_type: str, filename: str, cache_control: str
    ) -> RenditionPayload:
        return RenditionPayload(
            content=content,
            media_type=media_type,
            filename=filename,
            etag=compute_etag(content),
            cache_control=cache_control,
        )
