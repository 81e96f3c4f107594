"""
简单的进程内限流器
"""
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple


@dataclass
class RateLimitResult:
    success: bool
    remaining: int
    reset_at: Optional[float] = None

    def wait_minutes(self, now: Optional[float] = None) -> int:
        if self.reset_at is None:
            return 0
        remaining_seconds = self.reset_at - (now if now is not None else time.time())
        return max(1, int(-(-remaining_seconds // 60)))


class RateLimiter:
    """固定窗口计数限流，配置为 动作 -> (最大次数, 窗口秒数)"""

    def __init__(self, limits: Dict[str, Tuple[int, int]], clock: Callable[[], float] = time.time):
        self.limits = dict(limits)
        self._clock = clock
        self._attempts: Dict[str, Tuple[int, float]] = {}

    def check(self, identifier: str, action: str) -> RateLimitResult:
        if action not in self.limits:
            return RateLimitResult(success=True, remaining=-1)
        max_attempts, window = self.limits[action]
        key = f"{identifier}:{action}"
        now = self._clock()

        count, reset_at = self._attempts.get(key, (0, 0.0))
        if now > reset_at:
            count, reset_at = 0, now + window

        if count >= max_attempts:
            self._attempts[key] = (count, reset_at)
            return RateLimitResult(success=False, remaining=0, reset_at=reset_at)

        count += 1
        self._attempts[key] = (count, reset_at)
        return RateLimitResult(success=True, remaining=max_attempts - count, reset_at=reset_at)

    def remaining(self, identifier: str, action: str) -> int:
        max_attempts, _ = self.limits[action]
        count, reset_at = self._attempts.get(f"{identifier}:{action}", (0, 0.0))
        if self._clock() > reset_at:
            return max_attempts
        return max_attempts - count
