from dataclasses import dataclass, field
from enum import Enum

from ..models import Image


class Rendition(str, Enum):
    THUMBNAIL = "thumbnail"
    FULL = "file"
    ORIGINAL = "original"
    RESIZED = "download"

    @property
    def requires_session(self) -> bool:
        return self in (Rendition.ORIGINAL, Rendition.RESIZED)


@dataclass(frozen=True)
class DownloadPreset:
    name: str
    width: int
    height: int

    @property
    def label(self) -> str:
        return f"{self.name}-{self.width}x{self.height}"


@dataclass(frozen=True)
class RenditionPayload:
    content: bytes
    media_type: str
    filename: str
    etag: str
    cache_control: str

    @property
    def content_length(self) -> int:
        return len(self.content)

    @property
    def headers(self) -> dict[str, str]:
        return {
            "ETag": self.etag,
            "Cache-Control": self.cache_control,
            "Content-Disposition": f'attachment; filename="{self.filename}"',
        }

    def matches(self, if_none_match: str | None) -> bool:
        """Evaluate an If-None-Match header against this payload's ETag."""
        if not if_none_match:
            return False

        for candidate in if_none_match.split(","):
            candidate = candidate.strip()
            if candidate == "*":
                return True
            if candidate.startswith("W/"):
                candidate = candidate[2:]
            if candidate == self.etag:
                return True
        return False


@dataclass
class ImagePage:
    images: list[Image] = field(default_factory=list)
    total_count: int = 0
    limit: int = 50
    offset: int = 0
