from datetime import datetime, timedelta, timezone

import pytest
from tortoise.exceptions import IntegrityError

from src.gallery_service.app.models import Image, UserSession

pytestmark = pytest.mark.usefixtures("db")


class TestImageModel:
    @pytest.mark.parametrize(
        "filename,mime_type,original_data",
        [
            ("photo.jpg", "image/jpeg", b"\xff\xd8\xff original"),
            ("drawing.png", "image/png", b"\x89PNG original"),
            # Records ingested before originals were kept
            (None, None, None),
        ],
    )
    async def test_image_creation(self, filename, mime_type, original_data):
        image = await Image.create(
            original_filename=filename,
            width=800,
            height=600,
            blurhash="LEHV6nWB2yk8pyo0adR*.7kCMdnj",
            thumbnail_data=b"thumb",
            image_data=b"full",
            original_data=original_data,
            original_mime_type=mime_type,
            original_size=len(original_data) if original_data else None,
        )

        assert image.id is not None
        assert image.original_filename == filename
        assert image.original_mime_type == mime_type
        assert image.is_deleted is False
        assert image.created_at is not None
        assert image.updated_at is not None

        fetched = await Image.get(id=image.id)
        assert fetched.original_data == original_data

    async def test_ids_are_sequential_integers(self):
        common = {
            "width": 1,
            "height": 1,
            "blurhash": "00TI:j",
            "thumbnail_data": b"t",
            "image_data": b"i",
        }
        first = await Image.create(**common)
        second = await Image.create(**common)

        assert isinstance(first.id, int)
        assert second.id > first.id

    async def test_str(self):
        image = await Image.create(
            width=2,
            height=3,
            blurhash="00TI:j",
            thumbnail_data=b"t",
            image_data=b"i",
        )
        assert str(image) == f"<Image(id={image.id}, size=2x3, deleted=False)>"


class TestUserSessionModel:
    async def test_token_is_primary_key(self):
        expires_at = datetime.now(timezone.utc) + timedelta(hours=1)
        await UserSession.create(token="abc", user_id=1, expires_at=expires_at)

        with pytest.raises(IntegrityError):
            await UserSession.create(token="abc", user_id=2, expires_at=expires_at)

    async def test_session_fields(self):
        expires_at = datetime.now(timezone.utc) + timedelta(hours=1)
        session = await UserSession.create(
            token="def", user_id=9, expires_at=expires_at
        )

        fetched = await UserSession.get(token="def")
        assert fetched.user_id == 9
        assert session.created_at is not None
