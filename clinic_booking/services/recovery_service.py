"""Password recovery with short-lived one-time codes sent by email."""

from datetime import datetime, timedelta
import logging
import secrets

from sqlalchemy.orm import Session

from ..core.config import Settings
from ..core.errors import NotFound, InvalidCode, CodeExpired, DeliveryFailed
from ..core.mailer import Mailer, MailDeliveryError
from ..core.security import get_password_hash
from .user_repository import UserRepository

logger = logging.getLogger(__name__)

RESET_CODE_DIGITS = 6


def generate_reset_code() -> str:
    """Return a random zero-padded 6-digit code."""
    return f"{secrets.randbelow(10 ** RESET_CODE_DIGITS):0{RESET_CODE_DIGITS}d}"


class RecoveryService:
    def __init__(self, db: Session, settings: Settings, mailer: Mailer):
        self.db = db
        self.settings = settings
        self.mailer = mailer
        self.users = UserRepository(db)

    def request_reset(self, email: str) -> None:
        user = self.users.find_by_email(email)
        if not user:
            raise NotFound("No account found with this email")

        user.reset_code = generate_reset_code()
        user.reset_code_expires = datetime.now() + timedelta(
            minutes=self.settings.RESET_CODE_EXPIRE_MINUTES
        )
        self.db.commit()

        try:
            self.mailer.send_reset_code(
                user.email, user.name, user.reset_code, self.settings.RESET_CODE_EXPIRE_MINUTES
            )
        except MailDeliveryError as e:
            # An undelivered code must not stay valid
            user.reset_code = None
            user.reset_code_expires = None
            self.db.commit()
            logger.error(f"Reset code for user {user.id} could not be delivered: {str(e)}")
            raise DeliveryFailed("Failed to send reset code. Please try again later.")

        logger.info(f"Reset code issued for user {user.id}")

    def confirm_reset(self, email: str, code: str, new_password: str) -> None:
        user = self.users.find_by_email(email)
        if not user:
            raise NotFound("No account found with this email")

        if not user.reset_code or not secrets.compare_digest(
            user.reset_code.encode(), code.strip().encode()
        ):
            raise InvalidCode("Invalid reset code")

        if user.reset_code_expires is None or datetime.now() > user.reset_code_expires:
            user.reset_code = None
            user.reset_code_expires = None
            self.db.commit()
            raise CodeExpired("Reset code has expired. Please request a new one.")

        # Password and code are written in one commit
        user.password_hash = get_password_hash(new_password)
        user.reset_code = None
        user.reset_code_expires = None
        self.db.commit()

        logger.info(f"Password reset completed for user {user.id}")
