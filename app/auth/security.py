from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import JWTError, jwt

from app.config import get_settings

settings = get_settings()


# Supabase access tokens are HS256 JWTs signed with the project JWT secret
def create_access_token(
    user_id: UUID,
    expires_delta: timedelta | None = None,
    role: str = "authenticated",
) -> str:
    if expires_delta is None:
        expires_delta = timedelta(hours=1)

    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {
        "sub": str(user_id),
        "aud": settings.jwt_audience,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.supabase_jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict | None:
    try:
        return jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
    except JWTError:
        return None


def user_id_from_token(token: str) -> UUID | None:
    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        return None
    try:
        return UUID(payload["sub"])
    except ValueError:
        return None
