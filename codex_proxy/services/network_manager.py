"""Shared HTTP client management for the backend call."""

from __future__ import annotations

import asyncio
from typing import Dict, Optional

import httpx


_CONNECTION_POOL_CONFIG: Dict[str, object] = {
    "limits": httpx.Limits(
        max_keepalive_connections=20,
        max_connections=100,
        keepalive_expiry=30,
    ),
    "timeout": httpx.Timeout(
        connect=10.0,
        read=120.0,
        write=30.0,
        pool=10.0,
    ),
    "http2": True,
}


class NetworkManager:
    """Own the single pooled AsyncClient every request shares."""

    def __init__(self, proxy_url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None, logger=None) -> None:
        self._proxy_url = proxy_url
        self._client = client
        self._client_lock = asyncio.Lock()
        self._logger = logger

    async def get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client

        async with self._client_lock:
            if self._client is None:
                if self._logger is not None:
                    self._logger.info("[CLIENT] 创建共享客户端", proxy=self._proxy_url or "direct")
                if self._proxy_url:
                    self._client = httpx.AsyncClient(proxy=self._proxy_url, **_CONNECTION_POOL_CONFIG)
                else:
                    self._client = httpx.AsyncClient(**_CONNECTION_POOL_CONFIG)
            return self._client

    async def cleanup(self) -> None:
        async with self._client_lock:
            client = self._client
            self._client = None

        if client is None:
            return

        try:
            await client.aclose()
        except Exception as exc:  # pragma: no cover - 问题记录即可
            if self._logger is not None:
                self._logger.error("[CLIENT] 关闭客户端失败", error=str(exc))
            return

        if self._logger is not None:
            self._logger.info("[CLIENT] 客户端已关闭")
