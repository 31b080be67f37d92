from .image import (
    ErrorResponse,
    ImageDeleteResponse,
    ImageDetails,
    ImageListResponse,
    ImageSummary,
    ImageUploadResponse,
)

__all__ = [
    "ErrorResponse",
    "ImageDeleteResponse",
    "ImageDetails",
    "ImageListResponse",
    "ImageSummary",
    "ImageUploadResponse",
]
