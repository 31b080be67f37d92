from fastapi import (
    APIRouter,
    Depends,
    File,
    Header,
    HTTPException,
    Query,
    Request,
    UploadFile,
)
from fastapi.responses import Response
from loguru import logger

from ..core.config import Settings, get_settings
from ..core.dependencies import (
    get_current_user_id,
    get_delivery_service,
    get_image_store,
    get_ingestion_service,
)
from ..core.exceptions import AuthenticationRequired, GalleryError
from ..db.database import check_database_health
from ..models import Image as ImageModel
from ..schemas import (
    ErrorResponse,
    ImageDeleteResponse,
    ImageDetails,
    ImageListResponse,
    ImageSummary,
    ImageUploadResponse,
)
from ..services.delivery import ImageDeliveryService
from ..services.domain import Rendition, RenditionPayload
from ..services.image_store import ImageStore
from ..services.ingestion import IngestionService, file_too_large

router = APIRouter()

PROTECTED_RESPONSES = {
    401: {"model": ErrorResponse, "description": "No valid session"},
    404: {"model": ErrorResponse, "description": "Unknown image or preset"},
}


@router.post("/images", response_model=ImageUploadResponse, status_code=201)
async def upload_image(
    file: UploadFile = File(...),
    user_id: int | None = Depends(get_current_user_id),
    ingestion: IngestionService = Depends(get_ingestion_service),
    delivery: ImageDeliveryService = Depends(get_delivery_service),
    settings: Settings = Depends(get_settings),
):
    """
    Upload an image and store it with its thumbnail, WebP and placeholder.

    Raises:
        HTTPException: 401 without a session, 400/413 for rejected files,
            422 when the file is not a usable image
    """
    logger.info(f"Received image upload request: {file.filename}")

    try:
        if user_id is None:
            raise AuthenticationRequired("Authentication required")

        max_size = settings.MAX_FILE_SIZE
        if file.size is not None and file.size > max_size:
            raise file_too_large(max_size)

        # One byte past the limit is enough for ingestion to reject it
        file_data = await file.read(max_size + 1)
        image_record = await ingestion.ingest_upload(file_data, file.filename)

        return ImageUploadResponse(
            id=delivery.public_id(image_record.id),
            message="Image uploaded successfully",
            width=image_record.width,
            height=image_record.height,
            blurhash=image_record.blurhash,
            original_mime_type=image_record.original_mime_type,
            original_size=image_record.original_size,
        )

    except Exception as e:
        _raise_http_error(e, f"uploading {file.filename}")


@router.get("/images", response_model=ImageListResponse)
async def list_images(
    request: Request,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    image_store: ImageStore = Depends(get_image_store),
    delivery: ImageDeliveryService = Depends(get_delivery_service),
):
    """List visible images, newest first."""
    logger.info(f"Listing images with limit={limit}, offset={offset}")

    try:
        page = await image_store.list_active(limit=limit, offset=offset)

        return ImageListResponse(
            images=[
                ImageSummary(**_summary_fields(request, delivery, image))
                for image in page.images
            ],
            total_count=page.total_count,
            limit=page.limit,
            offset=page.offset,
        )

    except Exception as e:
        _raise_http_error(e, "listing images")


@router.get("/images/{image_id}", response_model=ImageDetails)
async def get_image_details(
    image_id: str,
    request: Request,
    delivery: ImageDeliveryService = Depends(get_delivery_service),
):
    """Metadata for one image; accepts public or legacy numeric ids."""
    logger.info(f"Getting image details for {image_id}")

    try:
        image = await delivery.load_image(image_id)

        return ImageDetails(
            **_summary_fields(request, delivery, image),
            original_filename=image.original_filename,
            original_mime_type=image.original_mime_type,
            original_size=image.original_size,
            download_presets=sorted(delivery.settings.DOWNLOAD_PRESETS),
        )

    except Exception as e:
        _raise_http_error(e, f"loading image {image_id}")


@router.delete("/images/{image_id}", response_model=ImageDeleteResponse)
async def delete_image(
    image_id: str,
    user_id: int | None = Depends(get_current_user_id),
    delivery: ImageDeliveryService = Depends(get_delivery_service),
):
    """Hide an image from every read path; the stored row is kept."""
    try:
        deleted_id = await delivery.delete_image(image_id, user_id)
        return ImageDeleteResponse(id=delivery.public_id(deleted_id), deleted=True)

    except Exception as e:
        _raise_http_error(e, f"deleting image {image_id}")


@router.get("/images/{image_id}/thumbnail", name="serve_thumbnail")
async def serve_thumbnail(
    image_id: str,
    if_none_match: str | None = Header(None),
    delivery: ImageDeliveryService = Depends(get_delivery_service),
):
    """Square WebP thumbnail. Public."""
    return await _serve(delivery, image_id, Rendition.THUMBNAIL, if_none_match)


@router.get("/images/{image_id}/file", name="serve_full_image")
async def serve_full_image(
    image_id: str,
    if_none_match: str | None = Header(None),
    delivery: ImageDeliveryService = Depends(get_delivery_service),
):
    """Full-size WebP rendition. Public."""
    return await _serve(delivery, image_id, Rendition.FULL, if_none_match)


@router.get("/images/{image_id}/original", responses=PROTECTED_RESPONSES)
async def serve_original_image(
    image_id: str,
    if_none_match: str | None = Header(None),
    user_id: int | None = Depends(get_current_user_id),
    delivery: ImageDeliveryService = Depends(get_delivery_service),
):
    """
    Untouched original upload with its stored MIME type.

    Requires a session; anonymous callers get 401, never a redirect.
    """
    return await _serve(
        delivery, image_id, Rendition.ORIGINAL, if_none_match, user_id=user_id
    )


@router.get(
    "/images/{image_id}/download/{preset}", responses=PROTECTED_RESPONSES
)
async def download_resized_image(
    image_id: str,
    preset: str,
    if_none_match: str | None = Header(None),
    user_id: int | None = Depends(get_current_user_id),
    delivery: ImageDeliveryService = Depends(get_delivery_service),
):
    """
    Exact-size PNG/JPEG rendition for a named preset such as 16x9 or 9x16.

    Computed from the original on every request. Requires a session.
    """
    return await _serve(
        delivery,
        image_id,
        Rendition.RESIZED,
        if_none_match,
        user_id=user_id,
        preset=preset,
    )


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    database_ok = await check_database_health()
    return {
        "status": "healthy" if database_ok else "degraded",
        "service": "gallery",
        "database": database_ok,
    }


async def _serve(
    delivery: ImageDeliveryService,
    image_id: str,
    rendition: Rendition,
    if_none_match: str | None,
    user_id: int | None = None,
    preset: str | None = None,
) -> Response:
    try:
        payload = await delivery.get_rendition(
            image_id, rendition, user_id=user_id, preset_name=preset
        )
    except Exception as e:
        _raise_http_error(e, f"serving {rendition.value} for image {image_id}")

    return _render(payload, if_none_match)


def _render(payload: RenditionPayload, if_none_match: str | None) -> Response:
    if payload.matches(if_none_match):
        return Response(
            status_code=304,
            headers={"ETag": payload.etag, "Cache-Control": payload.cache_control},
        )

    return Response(
        content=payload.content,
        media_type=payload.media_type,
        headers=payload.headers,
    )


def _summary_fields(
    request: Request, delivery: ImageDeliveryService, image: ImageModel
) -> dict:
    public_id = delivery.public_id(image.id)
    return {
        "id": public_id,
        "width": image.width,
        "height": image.height,
        "blurhash": image.blurhash,
        "thumbnail_url": request.url_for("serve_thumbnail", image_id=public_id).path,
        "image_url": request.url_for("serve_full_image", image_id=public_id).path,
        "created_at": image.created_at,
    }


def _raise_http_error(error: Exception, action: str):
    if isinstance(error, HTTPException):
        raise error

    if isinstance(error, GalleryError):
        if error.status_code >= 500:
            logger.error(f"Error {action}: {error.message}")
        else:
            logger.warning(f"Rejected {action}: {error.message}")
        raise HTTPException(
            status_code=error.status_code, detail=error.error_code
        ) from error

    logger.error(f"Unexpected error {action}: {error}")
    raise HTTPException(status_code=500, detail="internal_error") from error
