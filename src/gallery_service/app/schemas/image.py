from datetime import datetime

from pydantic import BaseModel, Field


class ImageSummary(BaseModel):
    """Gallery card data for a single image"""

    id: str = Field(..., description="Public image identifier")
    width: int = Field(..., description="Original width in pixels")
    height: int = Field(..., description="Original height in pixels")
    blurhash: str = Field(..., description="BlurHash placeholder string")
    thumbnail_url: str = Field(..., description="Path of the WebP thumbnail")
    image_url: str = Field(..., description="Path of the full WebP rendition")
    created_at: datetime = Field(..., description="When the image was uploaded")


class ImageDetails(ImageSummary):
    """Full metadata for a single image"""

    original_filename: str | None = Field(None, description="Uploaded filename")
    original_mime_type: str | None = Field(None, description="MIME type of original")
    original_size: int | None = Field(None, description="Original size in bytes")
    download_presets: list[str] = Field(
        default_factory=list, description="Named resized download presets"
    )


class ImageListResponse(BaseModel):
    """Paginated list of gallery images"""

    images: list[ImageSummary] = Field(..., description="Images on this page")
    total_count: int = Field(..., description="Total number of visible images")
    limit: int = Field(..., description="Page size")
    offset: int = Field(..., description="Number of images skipped")


class ImageUploadResponse(BaseModel):
    """Response model for a successful upload"""

    id: str = Field(..., description="Public image identifier")
    message: str = Field(..., description="Success message")
    width: int = Field(..., description="Original width in pixels")
    height: int = Field(..., description="Original height in pixels")
    blurhash: str = Field(..., description="BlurHash placeholder string")
    original_mime_type: str = Field(..., description="Detected MIME type")
    original_size: int = Field(..., description="Upload size in bytes")


class ImageDeleteResponse(BaseModel):
    id: str = Field(..., description="Public image identifier")
    deleted: bool = Field(..., description="Whether the image is now hidden")


class ErrorResponse(BaseModel):
    """Error response model"""

    detail: str = Field(..., description="Machine-stable error token")
