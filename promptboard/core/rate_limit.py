"""
요청 제한 모듈

- RateLimitMiddleware: 클라이언트 IP 기준 분당 API 요청 수 제한
- LoginThrottle: 이메일+IP 기준 로그인 실패 횟수 제한

두 카운터 모두 프로세스 메모리에 보관되며 재시작 시 초기화된다.
"""

import logging
import math
import time
import unicodedata
from typing import Callable, Dict, Iterable, Optional, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from promptboard.core.config import settings

logger = logging.getLogger(__name__)


def client_ip(request: Request, trusted_proxies: Optional[Iterable[str]] = None) -> str:
    """
    요청 클라이언트 IP

    X-Forwarded-For는 클라이언트가 임의로 보낼 수 있으므로 직접 연결한 peer가
    신뢰하는 프록시일 때만 사용한다. 이 경우 오른쪽부터 신뢰하지 않는 첫 주소를 반환.
    """
    peer = request.client.host if request.client else "unknown"
    trusted = set(settings.trusted_proxies if trusted_proxies is None else trusted_proxies)
    if peer not in trusted:
        return peer

    forwarded = request.headers.get("x-forwarded-for")
    if not forwarded:
        return peer

    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    for hop in reversed(hops):
        if hop not in trusted:
            return hop
    return hops[0] if hops else peer


class RateLimitMiddleware(BaseHTTPMiddleware):
    """API 요청 제한 미들웨어 (IP + 분 단위 버킷)"""

    def __init__(
        self,
        app,
        limit_per_minute: int = 60,
        path_prefix: str = "/api",
        clock: Callable[[], float] = time.time,
        trusted_proxies: Optional[Iterable[str]] = None,
    ):
        super().__init__(app)
        self.limit = limit_per_minute
        self.path_prefix = path_prefix
        self.clock = clock
        self.trusted_proxies = trusted_proxies
        self.buckets: Dict[Tuple[str, int], int] = {}

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        minute = int(self.clock() // 60)
        key = (client_ip(request, self.trusted_proxies), minute)
        count = self.buckets.get(key, 0) + 1
        self.buckets[key] = count

        # 지난 분의 버킷 정리
        for stale in [k for k in self.buckets if k[1] < minute]:
            del self.buckets[stale]

        if count > self.limit:
            logger.warning(f"Rate limit exceeded: {key[0]} -> {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={"detail": "Too Many Requests"},
                headers={"Retry-After": str(60 - int(self.clock()) % 60)},
            )

        return await call_next(request)


class LoginThrottle:
    """로그인 실패 횟수 제한기"""

    def __init__(
        self,
        max_attempts: int = 5,
        decay_seconds: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_attempts = max_attempts
        self.decay_seconds = decay_seconds
        self.clock = clock
        # key -> (실패 횟수, 만료 시각)
        self._attempts: Dict[str, Tuple[int, float]] = {}

    @staticmethod
    def throttle_key(email: str, ip: str) -> str:
        """소문자 이메일과 IP를 조합한 키 (ASCII로 음역)"""
        normalized = unicodedata.normalize("NFKD", f"{email.lower()}|{ip}")
        return normalized.encode("ascii", "ignore").decode("ascii")

    def _current(self, key: str) -> Optional[Tuple[int, float]]:
        entry = self._attempts.get(key)
        if entry and entry[1] <= self.clock():
            del self._attempts[key]
            return None
        return entry

    def too_many_attempts(self, key: str) -> bool:
        entry = self._current(key)
        return entry is not None and entry[0] >= self.max_attempts

    def hit(self, key: str) -> int:
        """실패 1회 기록 후 누적 횟수 반환"""
        self._prune()
        entry = self._current(key)
        if entry is None:
            entry = (0, self.clock() + self.decay_seconds)
        attempts = entry[0] + 1
        self._attempts[key] = (attempts, entry[1])
        return attempts

    def _prune(self) -> None:
        # 만료된 키 정리
        now = self.clock()
        for stale in [k for k, (_, expires_at) in self._attempts.items() if expires_at <= now]:
            del self._attempts[stale]

    def __len__(self) -> int:
        return len(self._attempts)

    def available_in(self, key: str) -> int:
        """잠금 해제까지 남은 초"""
        entry = self._current(key)
        if entry is None:
            return 0
        return max(0, math.ceil(entry[1] - self.clock()))

    def clear(self, key: str) -> None:
        self._attempts.pop(key, None)


# 싱글톤 인스턴스
_login_throttle: Optional[LoginThrottle] = None


def get_login_throttle() -> LoginThrottle:
    """로그인 제한기 인스턴스 반환"""
    global _login_throttle
    if _login_throttle is None:
        _login_throttle = LoginThrottle(
            max_attempts=settings.LOGIN_MAX_ATTEMPTS,
            decay_seconds=settings.LOGIN_DECAY_SECONDS,
        )
    return _login_throttle
