"""
Inkwell 博客后端 - FastAPI应用主入口
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import auth, categories, comments, likes, posts, profiles, saved_posts, storage
from app.core.config import Settings, get_settings, settings as default_settings
from app.services.container import Services, create_services

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    创建FastAPI应用

    Args:
        services: 预先组装好的服务容器；为空时在启动阶段按配置创建
    """
    settings = services.settings if services is not None else default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "services", None) is None:
            owned = await create_services(settings)
            app.state.services = owned
        logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
        yield
        if owned is not None:
            await owned.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="博客文章发布与权限管理后端API",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.services = services
    app.dependency_overrides[get_settings] = lambda: settings

    # 配置CORS，会话依赖Cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    # 注册路由
    app.include_router(auth.router)
    app.include_router(posts.router)
    app.include_router(likes.router)
    app.include_router(comments.router)
    app.include_router(categories.router)
    app.include_router(profiles.router)
    app.include_router(saved_posts.router)
    app.include_router(storage.router)

    @app.get("/")
    async def root():
        """根路径"""
        return {
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "message": "Inkwell博客后端API正在运行"
        }

    @app.get("/health")
    async def health_check():
        """健康检查"""
        return {"status": "healthy"}

    return app


configure_logging(default_settings)
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.DEBUG
    )
