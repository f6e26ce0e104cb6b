import logging
import ssl

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine
from sqlalchemy.pool import NullPool

from orghub.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

connect_args = {}
if settings.db_ssl and not settings.is_sqlite:
    # asyncpg requires an SSL context, not sslmode
    ssl_context = ssl.create_default_context()
    ssl_context.check_hostname = False
    ssl_context.verify_mode = ssl.CERT_NONE
    connect_args["ssl"] = ssl_context

engine = create_async_engine(
    settings.async_db_url,
    poolclass=NullPool,
    connect_args=connect_args,
    echo=settings.db_echo,
)

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)

async def get_db():
    async with AsyncSessionLocal() as session:
        yield session


# Alias used by feature routers
get_session = get_db


async def init_db(bind: AsyncEngine | None = None):
    """Create all tables registered on the declarative base."""
    from orghub.core.db.base import Base
    # Import models so they register with the metadata
    from orghub.core.features.organizations.db import orm as _organizations  # noqa: F401
    from orghub.core.features.abac.db import orm as _abac  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")
