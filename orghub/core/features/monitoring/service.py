import logging
from sqlalchemy import text
from orghub.core.db.engine import AsyncSessionLocal

logger = logging.getLogger(__name__)


async def check_db_status(session_factory=AsyncSessionLocal) -> bool:
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
