from loguru import logger
from pixelvault_imaging import ProcessedImage
from tortoise.transactions import in_transaction

from ..models import Image as ImageModel
from ..models.image import MAX_IMAGE_ID
from .domain import ImagePage


class ImageStore:
    """Record access for images; soft-deleted rows are invisible to reads."""

    async def get_active(self, image_id: int) -> ImageModel | None:
        if not _storable(image_id):
            return None
        return await ImageModel.filter(id=image_id, is_deleted=False).first()

    async def create(
        self, processed: ProcessedImage, original_filename: str | None = None
    ) -> ImageModel:
        # One transaction per upload: the row lands with every derivative or not at all
        async with in_transaction() as connection:
            image_record = await ImageModel.create(
                original_filename=original_filename,
                width=processed.width,
                height=processed.height,
                blurhash=processed.blurhash,
                thumbnail_data=processed.thumbnail_webp,
                image_data=processed.image_webp,
                original_data=processed.original_image,
                original_mime_type=processed.original_mime_type,
                original_size=processed.original_size,
                using_db=connection,
            )

        logger.info(
            f"Stored image {image_record.id} ({processed.width}x{processed.height}, "
            f"{processed.original_mime_type}, {processed.original_size} bytes)"
        )
        return image_record

    async def soft_delete(self, image_id: int) -> bool:
        if not _storable(image_id):
            return False
        updated = await ImageModel.filter(id=image_id, is_deleted=False).update(
            is_deleted=True
        )
        return updated > 0

    async def list_active(self, limit: int = 50, offset: int = 0) -> ImagePage:
        images = (
            await ImageModel.filter(is_deleted=False)
            .order_by("-created_at", "-id")
            .offset(offset)
            .limit(limit)
            .only(
                "id",
                "original_filename",
                "width",
                "height",
                "blurhash",
                "original_mime_type",
                "original_size",
                "created_at",
            )
        )
        total_count = await self.count_active()

        return ImagePage(
            images=list(images), total_count=total_count, limit=limit, offset=offset
        )

    async def count_active(self) -> int:
        return await ImageModel.filter(is_deleted=False).count()


def _storable(image_id: int) -> bool:
    # Ids past the primary key range cannot name a row; the driver would
    # overflow binding them
    return 0 < image_id <= MAX_IMAGE_ID
