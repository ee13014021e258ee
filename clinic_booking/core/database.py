from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator
import redis

from .config import get_settings

settings = get_settings()
database_url = settings.get_database_url

if database_url.startswith("sqlite"):
    # SQLite is used for tests and local development
    engine = create_engine(database_url, connect_args={"check_same_thread": False, "timeout": 30})
else:
    engine = create_engine(
        database_url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # Recycle connections after 30 minutes
        pool_pre_ping=True,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Connections are opened lazily, on the first command
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_redis():
    """Get Redis client."""
    return redis_client


def init_db():
    """Initialize database tables."""
    # Import models so they register on Base.metadata
    from .. import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
