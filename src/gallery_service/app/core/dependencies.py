from functools import lru_cache

from fastapi import Depends, Request
from pixelvault_imaging import DerivativeGenerator, IdentifierCodec

from ..core.config import get_settings
from ..services.delivery import ImageDeliveryService
from ..services.image_store import ImageStore
from ..services.ingestion import IngestionService
from ..services.session_store import SessionStore


@lru_cache()
def get_identifier_codec() -> IdentifierCodec:
    settings = get_settings()
    return IdentifierCodec(settings.HASHIDS_SALT, settings.HASHIDS_MIN_LENGTH)


@lru_cache()
def get_derivative_generator() -> DerivativeGenerator:
    return DerivativeGenerator(get_settings().derivative_settings)


@lru_cache()
def get_image_store() -> ImageStore:
    return ImageStore()


@lru_cache()
def get_session_store() -> SessionStore:
    return SessionStore(settings=get_settings())


def get_ingestion_service() -> IngestionService:
    return IngestionService(
        generator=get_derivative_generator(),
        image_store=get_image_store(),
        settings=get_settings(),
    )


def get_delivery_service() -> ImageDeliveryService:
    return ImageDeliveryService(
        codec=get_identifier_codec(),
        generator=get_derivative_generator(),
        image_store=get_image_store(),
        settings=get_settings(),
    )


def _session_token(request: Request, cookie_name: str) -> str | None:
    token = request.cookies.get(cookie_name)
    if token:
        return token

    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


async def get_current_user_id(
    request: Request,
    session_store: SessionStore = Depends(get_session_store),
) -> int | None:
    """Return the signed-in user's id, or None for anonymous requests."""
    token = _session_token(request, get_settings().SESSION_COOKIE_NAME)
    return await session_store.get_user_id(token)
