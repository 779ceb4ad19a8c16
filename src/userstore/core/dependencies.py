from sqlalchemy.ext.asyncio import AsyncSession

from userstore.config.settings import Settings, get_settings
from userstore.repositories.user_repository import UserRepository


def get_user_repository(session: AsyncSession, settings: Settings | None = None) -> UserRepository:
    # Repository bound to the caller's session, configured from settings
    settings = settings or get_settings()
    return UserRepository(
        session,
        delete_mode=settings.USER_DELETE_MODE,
        timeout=settings.DB_OPERATION_TIMEOUT,
    )
