"""
数据库连接和会话管理
"""
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

# 创建Base类
Base = declarative_base()


def build_engine(url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """
    创建异步引擎

    SQLite不支持连接池参数，仅对其他数据库设置
    """
    options = {"echo": echo, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(pool_size=10, max_overflow=20)
    options.update(kwargs)
    return create_async_engine(url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """
    创建会话工厂
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    创建所有数据表
    """
    import app.models  # noqa: F401  注册模型

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
