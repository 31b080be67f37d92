import secrets
from datetime import datetime, timedelta, timezone

from loguru import logger

from ..core.config import Settings
from ..models import UserSession


class SessionStore:
    """Server-side session lookup backing the session cookie.

    Sessions are issued by the sign-in flow; the serving path only ever asks
    which user, if any, a presented token belongs to.
    """

    def __init__(self, settings: Settings = None):
        from ..core.config import get_settings

        self.settings = settings or get_settings()

    async def create_session(self, user_id: int) -> str:
        token = secrets.token_urlsafe(32)
        expires_at = datetime.now(timezone.utc) + timedelta(
            seconds=self.settings.SESSION_TTL_SECONDS
        )
        await UserSession.create(token=token, user_id=user_id, expires_at=expires_at)
        logger.info(f"Created session for user {user_id}")
        return token

    async def get_user_id(self, token: str | None) -> int | None:
        if not token:
            return None

        session = await UserSession.filter(token=token).first()
        if session is None:
            return None

        expires_at = session.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)

        if expires_at <= datetime.now(timezone.utc):
            logger.info(f"Expired session presented for user {session.user_id}")
            await session.delete()
            return None

        return session.user_id

    async def revoke(self, token: str) -> bool:
        deleted = await UserSession.filter(token=token).delete()
        return deleted > 0
