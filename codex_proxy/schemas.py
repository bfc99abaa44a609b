"""
Application data models
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Inbound chat dialect
# ---------------------------------------------------------------------------

class Message(BaseModel):
    """Chat message model; content may be a string, a part list or anything else"""
    role: str
    content: Any = None

    model_config = ConfigDict(extra="allow")


class ChatRequest(BaseModel):
    """OpenAI-compatible chat completion request"""
    model: str
    messages: List[Message]
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stream: Optional[bool] = None
    tools: Optional[List[Any]] = None
    tool_choice: Optional[Any] = None

    model_config = ConfigDict(extra="allow")


# ---------------------------------------------------------------------------
# Backend responses dialect
# ---------------------------------------------------------------------------

class InputText(BaseModel):
    type: Literal["input_text"] = "input_text"
    text: str


class InputMessage(BaseModel):
    """One `input` item of the Responses API"""
    type: Literal["message"] = "message"
    role: str
    content: List[InputText]


class ResponsesRequest(BaseModel):
    """Responses API request body sent to the backend"""
    model: str
    instructions: str
    input: List[InputMessage]
    tools: List[Any] = Field(default_factory=list)
    tool_choice: str = "auto"
    parallel_tool_calls: bool = False
    reasoning: Optional[Dict[str, Any]] = None
    store: bool = False
    stream: bool = True
    include: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Outbound chat dialect
# ---------------------------------------------------------------------------

class ResponseMessage(BaseModel):
    role: str = "assistant"
    content: str


class Choice(BaseModel):
    index: int = 0
    message: ResponseMessage
    finish_reason: Optional[str] = "stop"


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatResponse(BaseModel):
    """Non-streaming chat completion response"""
    id: str
    object: str = "chat.completion"
    created: int
    model: str
    choices: List[Choice]
    usage: Usage = Field(default_factory=Usage)


class Model(BaseModel):
    """Model information for listing"""
    id: str
    object: str = "model"
    created: int
    owned_by: str = "openai"


class ModelsResponse(BaseModel):
    """Models list response model"""
    object: str = "list"
    data: List[Model]
