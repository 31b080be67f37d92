from loguru import logger
from pixelvault_imaging import DecodeError, DerivativeGenerator, EncodeError

from ..core.config import Settings
from ..core.exceptions import IngestionFailed, UploadRejected, UploadTooLarge
from ..models import Image as ImageModel
from .image_store import ImageStore


class IngestionService:
    def __init__(
        self,
        generator: DerivativeGenerator | None = None,
        image_store: ImageStore | None = None,
        settings: Settings = None,
    ):
        from ..core.config import get_settings

        self.settings = settings or get_settings()
        self.generator = generator or DerivativeGenerator(
            self.settings.derivative_settings
        )
        self.image_store = image_store or ImageStore()

    async def ingest_upload(
        self, file_data: bytes, original_filename: str | None = None
    ) -> ImageModel:
        if not file_data:
            raise UploadRejected("Empty file provided")

        if len(file_data) > self.settings.MAX_FILE_SIZE:
            raise file_too_large(self.settings.MAX_FILE_SIZE)

        logger.info(
            f"Starting ingestion for {original_filename or '<unnamed>'} "
            f"({len(file_data)} bytes)"
        )

        try:
            processed = await self.generator.ingest(file_data)
        except DecodeError as e:
            logger.warning(f"Rejected undecodable upload {original_filename}: {e}")
            raise IngestionFailed(f"Uploaded file is not a supported image: {e}") from e
        except EncodeError as e:
            logger.error(f"Derivative generation failed for {original_filename}: {e}")
            raise IngestionFailed(f"Failed to process image: {e}") from e

        # Nothing is written until every derivative exists
        image_record = await self.image_store.create(processed, original_filename)

        logger.info(
            f"Ingested {original_filename or '<unnamed>'} as image {image_record.id}"
        )
        return image_record


def file_too_large(max_size: int) -> UploadTooLarge:
    return UploadTooLarge(
        f"File too large. Maximum size is {max_size // (1024 * 1024)}MB"
    )
