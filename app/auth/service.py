import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.models import Profile
from app.common.exceptions import UnauthenticatedException, WriteFailedException
from app.payments.ids import parse_payment_id

logger = logging.getLogger(__name__)


def resolve_user_id(token_user_id: UUID | None, payment_id: str) -> UUID:
    """
    Pick the acting user for a payment verification.

    A validated bearer token wins. Without one, the user id embedded in the
    payment id is trusted as-is (the checkout widget builds it client-side),
    so anyone holding a payment id can verify it on the payer's behalf.
    """
    if token_user_id is not None:
        return token_user_id

    parsed = parse_payment_id(payment_id)
    if parsed is None:
        raise UnauthenticatedException("Could not authenticate user")

    logger.info(f"Using user id {parsed.user_id} embedded in payment {payment_id}")
    return parsed.user_id


class ProfileService:
    def __init__(self, db: Session):
        self.db = db

    def get_profile(self, user_id: UUID) -> Profile | None:
        stmt = select(Profile).where(Profile.id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def mark_paid(self, user_id: UUID) -> Profile:
        """Upsert the profile with ``has_paid`` set."""
        profile = self.get_profile(user_id)
        if profile is None:
            profile = Profile(id=user_id, has_paid=True)
            self.db.add(profile)
        else:
            profile.has_paid = True

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update profile {user_id}: {e}")
            raise WriteFailedException("Failed to update profile")

        self.db.refresh(profile)
        return profile
