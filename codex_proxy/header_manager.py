#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
请求头管理器模块 - 封装发往 ChatGPT 后端的 HTTP 请求头
"""

from typing import Dict

from fastuuid import uuid4

from .auth import AuthData


USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class HeaderManager:
    """
    请求头管理器

    - 固定的浏览器风格 header 模板
    - 每次调用生成新的 session_id
    - 按凭据追加认证头
    """

    def __init__(self) -> None:
        self._header_template: Dict[str, str] = {
            "User-Agent": USER_AGENT,
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
            "Accept-Language": "en-US,en;q=0.9",
            "Accept-Encoding": "gzip, deflate, br",
            "Referer": "https://chatgpt.com/",
            "Origin": "https://chatgpt.com",
            "Sec-Fetch-Dest": "empty",
            "Sec-Fetch-Mode": "cors",
            "Sec-Fetch-Site": "same-origin",
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
            "DNT": "1",
            "OpenAI-Beta": "responses=experimental",
            "originator": "codex_cli_rs",
        }

    def get_header_template(self) -> Dict[str, str]:
        """返回 header 模板的副本"""
        return self._header_template.copy()

    def build_headers(self, auth: AuthData) -> Dict[str, str]:
        """
        生成一次后端调用的完整 headers

        Args:
            auth: 已加载的凭据

        Returns:
            完整的 HTTP headers 字典
        """
        headers = self.get_header_template()
        headers.update(auth.authorization_headers())
        headers["session_id"] = str(uuid4())
        return headers


# 全局实例（模板只读）
header_manager = HeaderManager()
