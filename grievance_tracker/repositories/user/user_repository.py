"""
User repository.
"""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from grievance_tracker.core.exceptions import EntityNotFoundError
from grievance_tracker.models.base import UserRole
from grievance_tracker.models.user import User
from grievance_tracker.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):

    def __init__(self, db: Session):
        super().__init__(User, db)

    def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive e-mail lookup."""
        if not email or not email.strip():
            return None
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return self.db.scalar(stmt)

    def set_role(self, user_id: int, role: UserRole) -> User:
        """
        Replace the user's role.

        Setting the role a user already has is a no-op, so promotions can
        be retried safely.

        Raises:
            EntityNotFoundError: If the user does not exist
        """
        user = self.find_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User", str(user_id))
        if user.role != role:
            user.role = role
            self.db.flush()
        return user
