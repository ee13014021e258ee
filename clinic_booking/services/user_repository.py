"""User repository - database operations for accounts"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import InvalidInput
from ..models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Identity store backed by the users table"""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def email_taken(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        query = self.db.query(User.id).filter(User.email == email.lower())
        if exclude_user_id is not None:
            query = query.filter(User.id != exclude_user_id)
        return query.first() is not None

    def create(self, user: User, commit: bool = True) -> User:
        """Add a user, rejecting an email that is already registered."""
        user.email = user.email.lower()
        if self.email_taken(user.email):
            raise InvalidInput("User with this email already exists")

        self.db.add(user)
        try:
            self.db.flush()
            if commit:
                self.db.commit()
                self.db.refresh(user)
        except IntegrityError:
            # Concurrent registration with the same email
            self.db.rollback()
            raise InvalidInput("User with this email already exists")

        return user

    def save(self, user: User) -> User:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise InvalidInput("Email is already taken")
        self.db.refresh(user)
        return user

    def delete(self, user: User) -> None:
        """Remove a user; the linked doctor profile goes with it."""
        logger.info(f"Deleting user {user.id} ({user.role})")
        self.db.delete(user)
        self.db.commit()
