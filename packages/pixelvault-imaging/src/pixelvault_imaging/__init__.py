__version__ = "0.1.0"

from .derivatives import (
    DEFAULT_MIME_TYPE,
    DerivativeGenerator,
    download_format_for,
    extension_for_mime_type,
    mime_type_for_format,
)
from .identifiers import (
    INVALID,
    Decoded,
    IdentifierCodec,
    IdentifierSource,
    ResolvedIdentifier,
    parse_legacy_id,
)
from .pillow_backend import PillowBackend
from .types import (
    DecodeError,
    DerivativeSettings,
    DownloadFormat,
    EncodeError,
    ImageBackend,
    ImageInfo,
    ImagingError,
    InvalidIdentifierError,
    ProcessedImage,
    WebPMode,
)

__all__ = [
    "DEFAULT_MIME_TYPE",
    "DerivativeGenerator",
    "download_format_for",
    "extension_for_mime_type",
    "mime_type_for_format",
    "INVALID",
    "Decoded",
    "IdentifierCodec",
    "IdentifierSource",
    "ResolvedIdentifier",
    "parse_legacy_id",
    "PillowBackend",
    "DecodeError",
    "DerivativeSettings",
    "DownloadFormat",
    "EncodeError",
    "ImageBackend",
    "ImageInfo",
    "ImagingError",
    "InvalidIdentifierError",
    "ProcessedImage",
    "WebPMode",
]
