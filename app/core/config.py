"""
应用配置文件
"""
from pydantic_settings import BaseSettings
from typing import Optional, Dict, List, Tuple


class Settings(BaseSettings):
    """应用配置"""

    # 应用基本配置
    APP_NAME: str = "Inkwell"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # CORS配置
    CORS_ORIGINS: list = ["*"]

    # 文档存储配置：sql / memory / appwrite
    STORE_BACKEND: str = "sql"

    # 数据库配置
    DB_USERNAME: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "inkwell"
    SQLALCHEMY_URL: Optional[str] = None  # 设置后覆盖上面的PostgreSQL配置

    # 托管后端（Appwrite兼容REST接口）
    APPWRITE_ENDPOINT: str = "http://localhost/v1"
    APPWRITE_PROJECT_ID: str = "inkwell"
    APPWRITE_API_KEY: Optional[str] = None
    APPWRITE_DATABASE_ID: str = "inkwell"

    # 文件存储配置：local / appwrite
    BLOB_BACKEND: str = "local"
    BLOB_ROOT: str = "./uploads"
    BUCKET_ID: str = "images"
    STORAGE_ENDPOINT: str = "http://localhost:8000"

    # 集合配置
    POST_COLLECTION: str = "posts"
    PROFILE_COLLECTION: str = "profiles"
    CATEGORY_COLLECTION: str = "categories"
    COMMENT_COLLECTION: str = "comments"
    LIKES_COLLECTION: Optional[str] = "likes"  # 为空时点赞功能关闭
    SAVED_POST_COLLECTION: str = "saved_posts"
    USER_COLLECTION: str = "users"
    LOGIN_CODE_COLLECTION: str = "login_codes"
    ADMIN_COLLECTION: Optional[str] = None  # 为空时管理员功能关闭

    # JWT配置
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30
    TEMP_TOKEN_EXPIRE_MINUTES: int = 5

    # Cookie配置
    SESSION_COOKIE: str = "inkwell-session"
    USER_ID_COOKIE: str = "user-id"
    USER_ROLE_COOKIE: str = "user-role"
    COOKIE_MAX_AGE: int = 60 * 60 * 24 * 30
    COOKIE_SECURE: bool = False

    # 登录验证码配置
    LOGIN_CODE_EXPIRE_SECONDS: int = 900
    LOGIN_CODE_LENGTH: int = 6

    # 文章校验配置
    TITLE_MIN_LENGTH: int = 60
    TITLE_MAX_LENGTH: int = 200
    DESCRIPTION_MIN_WORDS: int = 10
    DESCRIPTION_MAX_WORDS: int = 100
    CONTENT_MIN_WORDS: int = 300
    CONTENT_MAX_WORDS: int = 5000
    SLUG_MAX_ATTEMPTS: int = 5

    # 图片上传配置
    IMAGE_MAX_BYTES: int = 5 * 1024 * 1024
    IMAGE_TYPES: List[str] = ["image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"]

    # 限流配置：动作 -> (最大次数, 窗口秒数)
    RATE_LIMITS: Dict[str, Tuple[int, int]] = {
        "otp_request": (33, 300),
        "otp_verify": (55, 900),
        "admin_otp_request": (50, 900),
        "admin_otp_verify": (100, 900),
    }

    @property
    def DATABASE_URL(self) -> str:
        """获取数据库连接URL"""
        if self.SQLALCHEMY_URL:
            return self.SQLALCHEMY_URL
        return f"postgresql+asyncpg://{self.DB_USERNAME}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def likes_enabled(self) -> bool:
        """点赞集合是否已配置"""
        return bool(self.LIKES_COLLECTION)

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()


def get_settings() -> Settings:
    """
    获取配置依赖
    """
    return settings
