import io
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from PIL import Image
from pixelvault_imaging import DerivativeGenerator, IdentifierCodec, ProcessedImage
from tortoise import Tortoise

from src.gallery_service.app.api.public import router as public_router
from src.gallery_service.app.core.config import Settings, get_settings
from src.gallery_service.app.core.dependencies import (
    get_delivery_service,
    get_image_store,
    get_ingestion_service,
    get_session_store,
)
from src.gallery_service.app.db.database import init_db
from src.gallery_service.app.models import Image as ImageModel
from src.gallery_service.app.services.delivery import ImageDeliveryService
from src.gallery_service.app.services.image_store import ImageStore
from src.gallery_service.app.services.ingestion import IngestionService
from src.gallery_service.app.services.session_store import SessionStore

VALID_TOKEN = "valid-session-token"
SIGNED_IN_USER_ID = 7


def _encode(image: Image.Image, fmt: str) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        HASHIDS_SALT="test-salt",
        HASHIDS_MIN_LENGTH=6,
        MAX_FILE_SIZE=1024 * 1024,
        DOWNLOAD_PRESETS={"16x9": (64, 36), "9x16": (36, 64)},
        LOG_FILE=str(tmp_path / "test.log"),
    )


@pytest.fixture
def codec(test_settings):
    return IdentifierCodec(test_settings.HASHIDS_SALT, test_settings.HASHIDS_MIN_LENGTH)


@pytest.fixture
def generator(test_settings):
    return DerivativeGenerator(test_settings.derivative_settings)


@pytest.fixture
def original_png_bytes():
    image = Image.new("RGB", (80, 60), color=(10, 120, 200))
    return _encode(image, "PNG")


@pytest.fixture
def original_jpeg_bytes():
    image = Image.new("RGB", (80, 60), color=(200, 120, 10))
    return _encode(image, "JPEG")


@pytest.fixture
def image_record(original_png_bytes):
    record = Mock(spec=ImageModel)
    record.id = 42
    record.original_filename = "sunset.png"
    record.width = 80
    record.height = 60
    record.blurhash = "LEHV6nWB2yk8pyo0adR*.7kCMdnj"
    record.thumbnail_data = b"thumbnail-webp-bytes"
    record.image_data = b"full-webp-bytes"
    record.original_data = original_png_bytes
    record.original_mime_type = "image/png"
    record.original_size = len(original_png_bytes)
    record.is_deleted = False
    record.created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return record


@pytest.fixture
def processed_image(original_png_bytes):
    return ProcessedImage(
        blurhash="LEHV6nWB2yk8pyo0adR*.7kCMdnj",
        thumbnail_webp=b"thumbnail-webp-bytes",
        image_webp=b"full-webp-bytes",
        original_image=original_png_bytes,
        original_mime_type="image/png",
        width=80,
        height=60,
        original_size=len(original_png_bytes),
    )


@pytest.fixture
def mock_image_store(image_record):
    """Store holding a single visible image with id 42."""
    mock = Mock(spec=ImageStore)

    async def get_active(image_id):
        return image_record if image_id == image_record.id else None

    mock.get_active = AsyncMock(side_effect=get_active)
    mock.create = AsyncMock(return_value=image_record)
    mock.soft_delete = AsyncMock(return_value=True)
    mock.list_active = AsyncMock()
    mock.count_active = AsyncMock(return_value=1)
    return mock


@pytest.fixture
def mock_session_store():
    mock = Mock(spec=SessionStore)

    async def get_user_id(token):
        return SIGNED_IN_USER_ID if token == VALID_TOKEN else None

    mock.get_user_id = AsyncMock(side_effect=get_user_id)
    return mock


@pytest.fixture
def delivery_service(codec, generator, mock_image_store, test_settings):
    return ImageDeliveryService(
        codec=codec,
        generator=generator,
        image_store=mock_image_store,
        settings=test_settings,
    )


@pytest.fixture
def mock_ingestion_service(image_record):
    mock = Mock(spec=IngestionService)
    mock.ingest_upload = AsyncMock(return_value=image_record)
    return mock


@pytest.fixture
def public_id(codec, image_record):
    return codec.encode(image_record.id)


@pytest.fixture
def session_token():
    return VALID_TOKEN


@pytest.fixture
def auth_headers(session_token):
    return {"Authorization": f"Bearer {session_token}"}


@pytest.fixture
def test_app(
    test_settings,
    delivery_service,
    mock_ingestion_service,
    mock_image_store,
    mock_session_store,
):
    app = FastAPI()

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_delivery_service] = lambda: delivery_service
    app.dependency_overrides[get_ingestion_service] = lambda: mock_ingestion_service
    app.dependency_overrides[get_image_store] = lambda: mock_image_store
    app.dependency_overrides[get_session_store] = lambda: mock_session_store

    app.include_router(public_router, prefix="/api")
    return app


@pytest.fixture
def test_client(test_app):
    return TestClient(test_app)


@pytest.fixture
async def db():
    """Fresh in-memory database per test."""
    await init_db("sqlite://:memory:")
    yield
    await Tortoise.close_connections()
