# EduFam Access - async database setup
import logging

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)

# Default for dev; override via config
DATABASE_URL = "sqlite+aiosqlite:///./edufam_access.db"


def _make_engine(url: str):
    if url.startswith("sqlite") and ":memory:" in url:
        # One shared connection, otherwise every session sees its own empty database
        return create_async_engine(url, echo=False, poolclass=StaticPool,
                                   connect_args={"check_same_thread": False})
    return create_async_engine(url, echo=False)


engine = _make_engine(DATABASE_URL)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(database_url: str | None = None):
    global engine, async_session
    if database_url:
        engine = _make_engine(database_url)
        async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database ready at %s", engine.url.render_as_string(hide_password=True))


async def dispose_db():
    await engine.dispose()
