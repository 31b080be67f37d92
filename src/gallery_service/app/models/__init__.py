from .image import Image
from .session import UserSession

__all__ = [
    "Image",
    "UserSession",
]
