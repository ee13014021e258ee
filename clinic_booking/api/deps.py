from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import logging
import redis

from ..core.config import Settings, get_settings
from ..core.database import get_db, get_redis
from ..core.errors import Unauthorized, Forbidden, RateLimited
from ..core.mailer import Mailer
from ..core.security import security, verify_token, UserRole, TokenPayload
from ..models.user import User

logger = logging.getLogger(__name__)


async def get_current_user_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    settings: Settings = Depends(get_settings),
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    if credentials is None:
        raise Unauthorized("Access token required")

    token_payload = verify_token(credentials.credentials, settings)
    if not token_payload or token_payload.user_id is None or token_payload.role is None:
        raise Unauthorized("Invalid or expired token")

    return token_payload


async def get_current_user(
    token_payload: TokenPayload = Depends(get_current_user_token),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from database."""
    user = db.get(User, token_payload.user_id)
    if not user:
        raise Unauthorized("User not found")

    return user


# Role-based access control dependencies
def require_role(*allowed_roles: UserRole):
    """Create a dependency that requires specific user roles."""
    async def role_checker(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if current_user.role not in allowed_roles:
            raise Forbidden(
                f"Access denied. Required roles: {[role.value for role in allowed_roles]}"
            )
        return current_user

    return role_checker


get_admin_user = require_role(UserRole.ADMIN)


def get_mailer(settings: Settings = Depends(get_settings)) -> Mailer:
    return Mailer(settings)


# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client=Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> None:
    """Fixed-window rate limiting for unauthenticated auth endpoints."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{request.url.path}:{client_ip}"

    try:
        current_requests = redis_client.incr(key)
        if current_requests == 1:
            redis_client.expire(key, settings.RATE_LIMIT_WINDOW_SECONDS)
    except redis.RedisError as e:
        # Limiter unavailable: let the request through
        logger.warning(f"Rate limiter unavailable: {str(e)}")
        return

    if current_requests > settings.RATE_LIMIT_REQUESTS:
        logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
        raise RateLimited()
