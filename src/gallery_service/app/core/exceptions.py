"""Service errors and the HTTP status plus stable token each one maps to."""


class GalleryError(Exception):
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str | None = None):
        self.message = message or self.error_code
        super().__init__(self.message)


class InvalidIdentifier(GalleryError):
    status_code = 400
    error_code = "invalid_identifier"

    def __init__(self, raw_id: str):
        self.raw_id = raw_id
        super().__init__(f"Invalid image ID: {raw_id!r}")


class AuthenticationRequired(GalleryError):
    status_code = 401
    error_code = "authentication_required"


class ImageNotFound(GalleryError):
    status_code = 404
    error_code = "image_not_found"

    def __init__(self, image_id: int):
        self.image_id = image_id
        super().__init__(f"Image {image_id} not found")


class UnknownPreset(GalleryError):
    status_code = 404
    error_code = "unknown_preset"

    def __init__(self, preset: str):
        self.preset = preset
        super().__init__(f"Unknown download preset: {preset!r}")


class DataUnavailable(GalleryError):
    """The record exists but the requested rendition was never stored."""

    status_code = 404
    error_code = "image_data_unavailable"

    def __init__(self, image_id: int, rendition: str):
        self.image_id = image_id
        self.rendition = rendition
        super().__init__(f"Image {image_id} has no stored {rendition} data")


class UploadRejected(GalleryError):
    status_code = 400
    error_code = "upload_rejected"


class UploadTooLarge(UploadRejected):
    status_code = 413
    error_code = "upload_too_large"


class IngestionFailed(GalleryError):
    status_code = 422
    error_code = "upload_failed"


class RenditionFailed(GalleryError):
    status_code = 500
    error_code = "internal_error"
