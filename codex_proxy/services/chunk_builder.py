#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
响应块构建器模块 - 封装 SSE 流式响应块构建逻辑

后端响应在这里已经完整缓冲，因此流只是固定的四帧回放：
角色帧、完整正文帧、结束帧、[DONE]。
"""

import time
from typing import List

from fastuuid import uuid4

from ..helpers import json_lib


DONE_FRAME = "data: [DONE]\n\n"


def generate_chunk_id() -> str:
    return f"chatcmpl-{uuid4()}"


class ChunkBuilder:
    """构建 chat.completion.chunk SSE 帧"""

    def _frame(self, chunk_id: str, model: str, delta: dict, finish_reason=None) -> str:
        return f"data: {json_lib.dumps({'id': chunk_id, 'object': 'chat.completion.chunk', 'created': int(time.time()), 'model': model, 'choices': [{ 'index': 0, 'delta': delta, 'finish_reason': finish_reason, }], })}\n\n"

    def build_role_chunk(self, chunk_id: str, model: str) -> str:
        """构建角色初始化 chunk（第一个 SSE 块）"""
        return self._frame(chunk_id, model, {'role': 'assistant'})

    def build_content_chunk(self, chunk_id: str, model: str, content: str) -> str:
        """构建正文内容 chunk"""
        return self._frame(chunk_id, model, {'content': content})

    def build_finish_chunk(self, chunk_id: str, model: str, finish_reason: str = 'stop') -> str:
        """构建结束 chunk"""
        return self._frame(chunk_id, model, {}, finish_reason=finish_reason)

    def emit(self, model: str, text: str) -> List[str]:
        """Replay a complete assistant reply as exactly four SSE frames."""
        chunk_id = generate_chunk_id()
        return [
            self.build_role_chunk(chunk_id, model),
            self.build_content_chunk(chunk_id, model, text),
            self.build_finish_chunk(chunk_id, model),
            DONE_FRAME,
        ]


# 全局实例（无状态）
chunk_builder = ChunkBuilder()
