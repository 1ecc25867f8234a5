import logging
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.auth.security import user_id_from_token
from app.auth.service import ProfileService
from app.common.exceptions import UnauthenticatedException
from app.database import get_db

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_optional_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> UUID | None:
    if credentials is None:
        return None

    user_id = user_id_from_token(credentials.credentials)
    if user_id is None:
        logger.info("Ignoring invalid bearer token")
    return user_id


def get_current_user_id(
    user_id: UUID | None = Depends(get_optional_user_id),
) -> UUID:
    if user_id is None:
        raise UnauthenticatedException("Login required")
    return user_id


def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    return ProfileService(db)


# Type aliases for cleaner route signatures
OptionalUserId = Annotated[UUID | None, Depends(get_optional_user_id)]
CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
