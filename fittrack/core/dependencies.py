from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.core.db import get_db
from fittrack.core.security import decode_user_id
from fittrack.models.user import User
from fittrack.repositories.user_repository import UserRepository
from fittrack.services.ai_service import ai_service
from fittrack.services.engagement_engine import EngagementEngine


security = HTTPBearer()


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    """Фабрика репозитория, инжектируется в эндпоинты через Depends."""
    return UserRepository(db)


def get_engagement_engine(db: AsyncSession = Depends(get_db)) -> EngagementEngine:
    return EngagementEngine(db, ai=ai_service)


async def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(security),
        repo: UserRepository = Depends(get_user_repository),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid access token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    user_id = decode_user_id(credentials.credentials)
    if user_id is None:
        raise credentials_exception

    user = await repo.get_by_id(user_id)
    if user is None:
        raise credentials_exception

    return user
