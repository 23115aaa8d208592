"""FastAPI 의존성. HTTP 클라이언트·Google Key Fetcher·Redis(Blocklist, 잡 락) 등 앱 생명주기 객체와 요청 메타."""

from typing import Any

from fastapi import Request

import httpx
from pyjwt_key_fetcher import AsyncKeyFetcher


def get_httpx_client(request: Request) -> httpx.AsyncClient:
    """
    앱 lifespan에서 생성한 싱글톤 AsyncClient 반환.
    매 요청마다 새 클라이언트를 만들지 않아 소켓 고갈(TIME_WAIT) 방지.
    """
    return request.app.state.httpx_client


def get_google_key_fetcher(request: Request) -> AsyncKeyFetcher:
    """앱 lifespan에서 생성한 Google JWKS AsyncKeyFetcher 싱글톤."""
    return request.app.state.google_key_fetcher


def get_redis_blocklist(request: Request) -> Any:
    """앱 lifespan에서 생성한 Blocklist용 Redis 비동기 클라이언트. 미설정 시 None."""
    return getattr(request.app.state, "redis_blocklist_client", None)


def get_redis_job_lock(request: Request) -> Any:
    """내부 잡 enqueue 중복 방지용 Redis 클라이언트. 미설정 시 None(락 생략)."""
    return getattr(request.app.state, "redis_job_lock_client", None)


def get_client_meta(request: Request) -> tuple[str | None, str | None]:
    """감사 로그용 (ip, user_agent)."""
    ip = request.client.host if request.client else None
    return ip, request.headers.get("user-agent")
