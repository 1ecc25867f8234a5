import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Uuid, false, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Profile(Base):
    """Per-user profile row; ``id`` is the auth provider's user id."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    has_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
