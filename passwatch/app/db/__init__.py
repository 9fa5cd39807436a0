import asyncio
import logging
import sys

logger = logging.getLogger(__name__)


async def init_models(drop: bool = False):
    """Create every PassWatch table. `drop=True` resets the database first."""
    from passwatch.app.db.base import Base, engine
    import passwatch.app.models  # noqa: F401  (registers tables on Base.metadata)

    try:
        async with engine.begin() as conn:
            if drop:
                logger.warning("Dropping all tables before re-creating them")
                await conn.run_sync(Base.metadata.drop_all)
            logger.info("Creating database tables")
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables ready")
    except Exception as e:
        logger.error(f"Could not create database tables: {e}")
        raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(init_models(drop="--drop" in sys.argv))
