import io

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .types import DecodeError, EncodeError, ImageBackend

RESAMPLE = Image.Resampling.LANCZOS


class PillowBackend(ImageBackend):
    def probe(self, data: bytes) -> tuple[Image.Image, str | None]:
        if not data:
            raise DecodeError("Empty image data")

        try:
            image = Image.open(io.BytesIO(data))
            # Force a full decode so truncated files fail here, not mid-resize
            image.load()
        except Image.DecompressionBombError as e:
            raise DecodeError(f"Image exceeds pixel limit: {e}") from e
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise DecodeError(f"Unrecognized image data: {e}") from e

        return image, image.format

    def dimensions(self, image: Image.Image) -> tuple[int, int]:
        return image.size

    def normalize(self, image: Image.Image) -> Image.Image:
        return normalize_mode(image)

    def flatten(
        self, image: Image.Image, background: tuple[int, int, int] = (255, 255, 255)
    ) -> Image.Image:
        return flatten_alpha(normalize_mode(image), background)

    def rgb_pixels(self, image: Image.Image) -> np.ndarray:
        return np.asarray(image.convert("RGB"), dtype=np.uint8)

    def resize_cover_fit(
        self, image: Image.Image, width: int, height: int
    ) -> Image.Image:
        if width <= 0 or height <= 0:
            raise ValueError(f"Target size must be positive, got {width}x{height}")
        return ImageOps.fit(
            image, (width, height), method=RESAMPLE, centering=(0.5, 0.5)
        )

    def resize_contain(self, image: Image.Image, max_dim: int) -> Image.Image:
        if max_dim <= 0:
            raise ValueError(f"max_dim must be positive, got {max_dim}")

        width, height = image.size
        longest = max(width, height)
        if longest <= max_dim:
            return image.copy()

        scale = max_dim / longest
        target = (max(1, round(width * scale)), max(1, round(height * scale)))
        return image.resize(target, RESAMPLE)

    def encode(self, image: Image.Image, fmt: str, **options) -> bytes:
        buffer = io.BytesIO()
        try:
            image.save(buffer, format=fmt, **options)
        except (OSError, ValueError, KeyError) as e:
            raise EncodeError(f"Failed to encode {fmt}: {e}") from e
        return buffer.getvalue()

    def release(self, image: Image.Image) -> None:
        image.close()


def normalize_mode(image: Image.Image) -> Image.Image:
    """Convert to RGB, or RGBA when the source carries transparency."""
    if image.mode in ("RGB", "RGBA"):
        return image

    has_alpha = image.mode in ("LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )
    return image.convert("RGBA" if has_alpha else "RGB")


def flatten_alpha(
    image: Image.Image, background: tuple[int, int, int] = (255, 255, 255)
) -> Image.Image:
    if image.mode != "RGBA":
        return image.convert("RGB")

    flattened = Image.new("RGB", image.size, background)
    flattened.paste(image, mask=image.getchannel("A"))
    return flattened
