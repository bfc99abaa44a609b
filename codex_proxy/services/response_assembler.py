"""Build the non-streaming chat.completion body from assistant text."""

import time

from ..schemas import ChatResponse, Choice, ResponseMessage, Usage
from .chunk_builder import generate_chunk_id


def assemble(model: str, text: str) -> ChatResponse:
    # No token accounting: usage counters are always zero.
    return ChatResponse(
        id=generate_chunk_id(),
        created=int(time.time()),
        model=model,
        choices=[
            Choice(
                index=0,
                message=ResponseMessage(role="assistant", content=text),
                finish_reason="stop",
            )
        ],
        usage=Usage(prompt_tokens=0, completion_tokens=0, total_tokens=0),
    )
