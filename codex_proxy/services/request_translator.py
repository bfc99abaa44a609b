#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
请求转换器 - OpenAI chat 格式 -> Codex Responses 格式
"""

from typing import Any, List

from ..helpers import json_lib
from ..schemas import ChatRequest, InputMessage, InputText, ResponsesRequest


ASSISTANT_INSTRUCTIONS = (
    "You are a helpful AI assistant. Provide clear, accurate, and concise "
    "responses to user questions and requests."
)


def normalize_content(content: Any) -> str:
    """
    将任意形状的 message content 折叠为单个字符串

    - str: 原样返回
    - list: 依次取对象的 `text` 字段或字符串元素本身，以空格拼接，其它元素忽略
    - 其它: 序列化为 JSON 文本
    """
    if isinstance(content, str):
        return content

    if isinstance(content, list):
        parts: List[str] = []
        for part in content:
            if isinstance(part, dict):
                text = part.get("text")
                if isinstance(text, str):
                    parts.append(text)
            elif isinstance(part, str):
                parts.append(part)
        return " ".join(parts)

    return json_lib.dumps(content)


def translate(request: ChatRequest) -> ResponsesRequest:
    """Convert an inbound chat request into the backend request body.

    The backend is always consumed as an event stream, so `stream` is forced
    on here whatever the client asked for. The client's `tool_choice` is not
    forwarded.
    """
    input_items = [
        InputMessage(
            role=message.role,
            content=[InputText(text=normalize_content(message.content))],
        )
        for message in request.messages
    ]

    return ResponsesRequest(
        model=request.model,
        instructions=ASSISTANT_INSTRUCTIONS,
        input=input_items,
        tools=list(request.tools or []),
        tool_choice="auto",
        parallel_tool_calls=False,
        store=False,
        stream=True,
        include=[],
    )
