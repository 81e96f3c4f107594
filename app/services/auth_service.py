"""
认证服务

邮箱验证码登录：发送验证码 -> 返回临时token -> 提交验证码 -> 签发会话token
"""
import logging
import re
import secrets
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.core.config import Settings
from app.schemas.auth import LoginResult, SessionInfo, User
from app.services.admin import AdminMembership
from app.services.base import ServiceBase
from app.services.mappers import to_login_code, to_user
from app.services.profile_service import redirect_path
from app.services.results import (
    ActionResult, ErrorKind, action_boundary, fail, invalid, not_authenticated,
    not_authorized, not_found, ok,
)
from app.store.base import DocumentStore, DuplicateDocument, equal, new_id
from app.utils.auth import create_access_token, create_temp_token, verify_temp_token
from app.utils.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

OTP_SENT_MESSAGE = "If this email exists, a verification code has been sent."
ADMIN_OTP_SENT_MESSAGE = "If this email has admin privileges, a verification code has been sent."
INVALID_CODE = "Invalid verification code"
SESSION_EXPIRED = "Verification session expired. Please request a new code."
TOO_MANY_VERIFY = "Too many verification attempts. Please request a new code."

ADMIN_ROLE = "admin"
ADMIN_HOME = "/dashboard"


class OTPSender(ABC):
    """验证码投递渠道"""

    @abstractmethod
    async def send(self, email: str, code: str) -> None:
        """把验证码发送给用户"""


class LoggingOTPSender(OTPSender):
    """开发环境使用：验证码只写入日志"""

    async def send(self, email: str, code: str) -> None:
        logger.info("login code for %s: %s", email, code)


class AuthService(ServiceBase):
    """认证服务类"""

    def __init__(
        self,
        settings: Settings,
        store: DocumentStore,
        admins: AdminMembership,
        limiter: RateLimiter,
        sender: Optional[OTPSender] = None,
    ):
        super().__init__(settings, store, admins)
        self.limiter = limiter
        self.sender = sender or LoggingOTPSender()

    def generate_verification_code(self, length: Optional[int] = None) -> str:
        """
        生成验证码

        Args:
            length: 验证码长度，默认使用配置中的长度
        """
        if length is None:
            length = self.settings.LOGIN_CODE_LENGTH
        return "".join(str(secrets.randbelow(10)) for _ in range(length))

    async def create_or_get_user(self, email: str) -> User:
        """根据邮箱查询或创建用户"""
        collection = self.settings.USER_COLLECTION
        doc = await self.store.find_one(collection, equal("email", email))
        if doc is not None:
            return to_user(doc)
        try:
            doc = await self.store.create(collection, new_id(), {"email": email}, unique=("email",))
        except DuplicateDocument:
            # 并发请求已经创建
            doc = await self.store.find_one(collection, equal("email", email))
        return to_user(doc)

    async def create_login_code(self, user_id: str) -> str:
        """
        为用户创建登录验证码

        步骤：
        1. 先使该用户未使用的旧验证码失效
        2. 生成新验证码并保存
        """
        collection = self.settings.LOGIN_CODE_COLLECTION
        previous = await self.store.list(collection, [equal("user_id", user_id)])
        for doc in previous.documents:
            if not doc.get("used"):
                await self.store.delete(collection, doc["$id"])

        code = self.generate_verification_code()
        expire_at = datetime.now(timezone.utc) + timedelta(seconds=self.settings.LOGIN_CODE_EXPIRE_SECONDS)
        await self.store.create(collection, new_id(), {
            "user_id": user_id,
            "code": code,
            "expire_at": expire_at.isoformat(),
            "used": False,
        })
        return code

    async def verify_login_code(self, user_id: str, code: str) -> bool:
        """校验验证码，成功后标记为已使用"""
        collection = self.settings.LOGIN_CODE_COLLECTION
        result = await self.store.list(collection, [equal("user_id", user_id)])
        now = datetime.now(timezone.utc)
        for doc in result.documents:
            login_code = to_login_code(doc)
            if login_code.used:
                continue
            expire_at = login_code.expireAt
            if expire_at.tzinfo is None:
                expire_at = expire_at.replace(tzinfo=timezone.utc)
            if expire_at <= now:
                continue
            if secrets.compare_digest(login_code.code, code):
                await self.store.update(collection, login_code.id, {"used": True})
                return True
        return False

    def _session(self, user_id: str) -> SessionInfo:
        expire = datetime.now(timezone.utc) + timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        token = create_access_token(
            self.settings, {"sub": user_id},
            expires_delta=timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        return SessionInfo(userId=user_id, token=token, expire=expire)

    def _rate_limited(self, ip: str, action: str, error: Optional[str] = None) -> Optional[ActionResult]:
        result = self.limiter.check(ip, action)
        if result.success:
            return None
        minutes = result.wait_minutes()
        logger.info("rate limit hit for %s on %s", ip, action)
        return fail(
            ErrorKind.NOT_AUTHORIZED,
            error or f"Too many attempts. Please try again in {minutes} minutes.",
            data={"retryAfterMinutes": minutes},
        )

    async def _start_login(self, email: str) -> str:
        user = await self.create_or_get_user(email)
        code = await self.create_login_code(user.id)
        await self.sender.send(email, code)
        return create_temp_token(self.settings, user.id)

    def _check_code(self, temp_token: str, code: str):
        """返回 (user_id, 错误结果)"""
        if not temp_token or not code or len(code) != self.settings.LOGIN_CODE_LENGTH or not code.isdigit():
            return None, invalid(INVALID_CODE)
        user_id = verify_temp_token(self.settings, temp_token)
        if not user_id:
            return None, not_authenticated(SESSION_EXPIRED)
        return user_id, None

    # ------------------------------------------------------------------ 普通用户

    @action_boundary("Failed to send verification code")
    async def send_otp(self, email: str, ip: str) -> ActionResult:
        """
        发送登录验证码

        无论邮箱是否存在都返回相同的提示，data 中为临时token
        """
        limited = self._rate_limited(ip, "otp_request")
        if limited:
            return limited
        email = (email or "").strip().lower()
        if not EMAIL_RE.match(email):
            return invalid("Please enter a valid email address")

        temp_token = await self._start_login(email)
        return ok(data={"tempToken": temp_token}, message=OTP_SENT_MESSAGE)

    @action_boundary(INVALID_CODE)
    async def verify_otp(self, temp_token: str, code: str, ip: str) -> ActionResult:
        limited = self._rate_limited(ip, "otp_verify", TOO_MANY_VERIFY)
        if limited:
            return limited
        user_id, error = self._check_code(temp_token, (code or "").strip())
        if error:
            return error
        if not await self.verify_login_code(user_id, code.strip()):
            return invalid(INVALID_CODE)

        profile = await self.find_profile_by_author(user_id)
        role = profile.role.value if profile else None
        logger.info("user %s signed in", user_id)
        return ok(
            data=LoginResult(
                session=self._session(user_id),
                hasProfile=profile is not None,
                role=role,
                redirectPath=redirect_path(role),
            ),
            message="Login successful",
        )

    # ------------------------------------------------------------------ 管理员

    @action_boundary("Failed to send verification code")
    async def send_admin_otp(self, email: str, ip: str) -> ActionResult:
        limited = self._rate_limited(ip, "admin_otp_request")
        if limited:
            minutes = limited.data["retryAfterMinutes"]
            limited.error = f"Too many admin login attempts. Please try again in {minutes} minutes."
            return limited
        email = (email or "").strip().lower()
        if not EMAIL_RE.match(email):
            return invalid("Please enter a valid email address")

        temp_token = await self._start_login(email)
        return ok(data={"tempToken": temp_token}, message=ADMIN_OTP_SENT_MESSAGE)

    @action_boundary(INVALID_CODE)
    async def verify_admin_otp(self, temp_token: str, code: str, ip: str) -> ActionResult:
        """验证码通过后还需要在管理员集合中"""
        limited = self._rate_limited(ip, "admin_otp_verify", TOO_MANY_VERIFY)
        if limited:
            return limited
        user_id, error = self._check_code(temp_token, (code or "").strip())
        if error:
            return error
        if not await self.verify_login_code(user_id, code.strip()):
            return invalid(INVALID_CODE)

        if not await self.is_admin(user_id):
            logger.info("non-admin user %s attempted admin login", user_id)
            return not_authorized("Access denied. Admin privileges required.")

        logger.info("admin %s signed in", user_id)
        return ok(
            data=LoginResult(
                session=self._session(user_id),
                hasProfile=True,
                role=ADMIN_ROLE,
                redirectPath=ADMIN_HOME,
            ),
            message="Admin login successful",
        )

    @action_boundary("Failed to fetch admin profile")
    async def current_admin_profile(self, user_id: Optional[str]) -> ActionResult:
        if not user_id:
            return not_authenticated("No user session found")
        record = await self.admins.find_record(user_id)
        if record is None:
            return not_found("Admin profile not found")
        profile = await self.find_profile_by_author(user_id)
        return ok(data={"userId": user_id, "admin": record, "profile": profile})
