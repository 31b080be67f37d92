from datetime import datetime, timedelta, timezone

import pytest

from src.gallery_service.app.models import UserSession
from src.gallery_service.app.services.session_store import SessionStore

pytestmark = pytest.mark.usefixtures("db")


@pytest.fixture
def session_store(test_settings):
    return SessionStore(settings=test_settings)


class TestSessionStore:
    async def test_created_session_resolves_to_user(self, session_store):
        token = await session_store.create_session(user_id=11)

        assert len(token) >= 32
        assert await session_store.get_user_id(token) == 11

    async def test_tokens_are_unique(self, session_store):
        first = await session_store.create_session(user_id=11)
        second = await session_store.create_session(user_id=11)

        assert first != second

    @pytest.mark.parametrize("token", [None, "", "unknown-token"])
    async def test_missing_or_unknown_token(self, session_store, token):
        assert await session_store.get_user_id(token) is None

    async def test_expired_session_is_removed(self, session_store):
        await UserSession.create(
            token="expired-token",
            user_id=3,
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
        )

        assert await session_store.get_user_id("expired-token") is None
        assert not await UserSession.filter(token="expired-token").exists()

    async def test_revoke(self, session_store):
        token = await session_store.create_session(user_id=5)

        assert await session_store.revoke(token) is True
        assert await session_store.get_user_id(token) is None
        assert await session_store.revoke(token) is False
