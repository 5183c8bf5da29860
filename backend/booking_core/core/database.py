from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base

from booking_core.core.config import get_settings

settings = get_settings()

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.sql_echo,
    future=True
)

# Create session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Base class for models
Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp for DateTime column defaults."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def init_models(bind=None):
    """Create all tables directly (local runs and tests; production uses Alembic)."""
    # Register the tables on Base.metadata.
    import booking_core.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
