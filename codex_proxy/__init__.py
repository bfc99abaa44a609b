"""
codex_proxy package - OpenAI chat-completions front for the Codex Responses backend
"""

from .config import settings, get_settings, ProxyConfig, load_allowed_models, load_proxy_config
from .auth import AuthData, TokenData, load_auth
from .errors import (
    ProxyError,
    InvalidRequestBody,
    ModelNotAllowed,
    BackendHttpError,
    BackendTransportError,
    EmptyContent,
)
from .schemas import ChatRequest, ChatResponse, ResponsesRequest, ModelsResponse, Model, Message
from .server import create_app

__all__ = [
    "settings",
    "get_settings",
    "ProxyConfig",
    "load_allowed_models",
    "load_proxy_config",
    "AuthData",
    "TokenData",
    "load_auth",
    "ProxyError",
    "InvalidRequestBody",
    "ModelNotAllowed",
    "BackendHttpError",
    "BackendTransportError",
    "EmptyContent",
    "ChatRequest",
    "ChatResponse",
    "ResponsesRequest",
    "ModelsResponse",
    "Model",
    "Message",
    "create_app",
]
