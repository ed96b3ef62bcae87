from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from .config import DATABASE_URL, DATABASE_ECHO
from .models import Base


def build_engine(url: str, **kwargs):
    return create_async_engine(url, echo=DATABASE_ECHO, **kwargs)


def build_session_factory(bind):
    return sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# Create async engine
engine = build_engine(DATABASE_URL)

# Create session factory
AsyncSessionLocal = build_session_factory(engine)

# Dependency to get database session
async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

# Create tables
async def create_tables(bind=None):
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
