"""
OpenAI API endpoints
"""

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from .errors import InvalidRequestBody
from .helpers import json_lib, preview_text, request_stage_log
from .schemas import ChatRequest, Message
from .services.openai_service import ChatCompletionService

router = APIRouter()


def get_service(request: Request) -> ChatCompletionService:
    return request.app.state.service


def parse_chat_request(body: bytes) -> ChatRequest:
    """Decode the raw body; both malformed JSON and a wrong shape are 400s."""
    try:
        payload = json_lib.loads(body)
    except ValueError as exc:
        raise InvalidRequestBody(str(exc)) from exc

    try:
        return ChatRequest.model_validate(payload)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'body'}: {err['msg']}" for err in exc.errors()
        )
        raise InvalidRequestBody(errors) from exc


def _content_preview(message: Message) -> str:
    content = message.content
    if isinstance(content, str):
        return preview_text(content)
    if isinstance(content, list):
        return f"[array with {len(content)} items]"
    return f"[{preview_text(json_lib.dumps(content))}]"


@router.get("/models")
@router.get("/v1/models")
async def list_models(request: Request):
    """List allowed models"""
    return get_service(request).models_response()


@router.post("/chat/completions")
@router.post("/v1/chat/completions")
async def chat_completions(request: Request):
    """处理 chat completion 请求，支持流式和非流式"""
    logger = request.state.logger
    service = get_service(request)

    body = await request.body()
    try:
        chat_request = parse_chat_request(body)
    except InvalidRequestBody as exc:
        logger.warning("❌ JSON parse error", error=exc.message, body_bytes=len(body))
        raise

    stream = bool(chat_request.stream)
    request_stage_log(
        logger,
        "received",
        "收到客户端请求",
        model=chat_request.model,
        stream=stream,
        message_count=len(chat_request.messages),
        tools_count=len(chat_request.tools) if chat_request.tools else 0,
    )
    for index, message in enumerate(chat_request.messages):
        logger.debug("[REQUEST] 消息", index=index, role=message.role, preview=_content_preview(message))

    if not stream:
        return await service.handle_non_stream_request(chat_request, logger)

    # 后端响应已完整缓冲，这里只是回放固定的四帧
    frames = await service.build_stream_frames(chat_request, logger)

    async def stream_response():
        for frame in frames:
            yield frame

    return StreamingResponse(
        stream_response(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )
