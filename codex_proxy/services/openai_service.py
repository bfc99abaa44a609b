"""Service layer orchestrating OpenAI-compatible chat completions."""

from __future__ import annotations

import time
from typing import List

import httpx

from ..config import ProxyConfig
from ..errors import BackendHttpError, BackendTransportError, ModelNotAllowed
from ..header_manager import header_manager
from ..helpers import perf_timer, request_stage_log
from ..schemas import ChatRequest, Model, ModelsResponse
from .chunk_builder import chunk_builder
from .network_manager import NetworkManager
from .request_translator import translate
from .response_assembler import assemble
from .response_parser import extract


class ChatCompletionService:
    """Encapsulate the chat completion workflow independent of the FastAPI layer.

    The service only holds references to the shared, immutable ProxyConfig
    and the shared NetworkManager; all per-request state lives in locals.
    """

    def __init__(self, config: ProxyConfig, network: NetworkManager) -> None:
        self.config = config
        self.network = network
        self.headers = header_manager
        self.chunk = chunk_builder

    def models_response(self) -> ModelsResponse:
        current_time = int(time.time())
        return ModelsResponse(
            data=[
                Model(id=model_id, created=current_time, owned_by="openai")
                for model_id in self.config.allowed_models
            ]
        )

    def ensure_model_allowed(self, model: str) -> None:
        if not self.config.is_model_allowed(model):
            raise ModelNotAllowed(model, self.config.allowed_models)

    async def fetch_assistant_text(self, request: ChatRequest, logger) -> tuple[str, str]:
        """Translate, call the backend once, buffer the body and extract the reply.

        Returns (model, assistant_text).
        """
        self.ensure_model_allowed(request.model)

        responses_request = translate(request)
        request_stage_log(
            logger,
            "transformed",
            "请求已转换为 Responses 格式",
            input_items=len(responses_request.input),
            tools_count=len(responses_request.tools),
        )

        client = await self.network.get_client()
        headers = self.headers.build_headers(self.config.auth)
        logger.debug("[UPSTREAM] 会话ID", session_id=headers["session_id"], auth=self.config.auth.source)

        request_stage_log(logger, "upstream_request", "向后端发起请求", upstream=self.config.backend_url)
        try:
            with perf_timer(logger, "backend round trip"):
                response = await client.post(
                    self.config.backend_url,
                    json=responses_request.model_dump(),
                    headers=headers,
                )
                raw_body = response.text
        except httpx.HTTPError as exc:
            logger.error("[UPSTREAM] 请求发送失败", error=str(exc))
            raise BackendTransportError(str(exc)) from exc

        if not response.is_success:
            logger.error(
                "上游返回错误",
                status_code=response.status_code,
                error_detail=raw_body[:200],
            )
            raise BackendHttpError(response.status_code, response.reason_phrase, raw_body)

        request_stage_log(
            logger,
            "upstream_response",
            "后端响应成功，开始解析事件流",
            status_code=response.status_code,
            body_bytes=len(raw_body),
        )

        text = extract(raw_body)
        logger.debug("[UPSTREAM] 已提取助手文本", length=len(text))
        return responses_request.model, text

    async def handle_non_stream_request(self, request: ChatRequest, logger) -> dict:
        model, text = await self.fetch_assistant_text(request, logger)
        response = assemble(model, text)
        request_stage_log(logger, "non_stream_completed", "非流式响应完成", response_id=response.id)
        return response.model_dump()

    async def build_stream_frames(self, request: ChatRequest, logger) -> List[str]:
        """Fully buffer the backend reply, then lay it out as the four SSE frames."""
        model, text = await self.fetch_assistant_text(request, logger)
        frames = self.chunk.emit(model, text)
        request_stage_log(logger, "stream_ready", "流式帧已生成", frames=len(frames))
        return frames
