"""Service layer: dialect translation, backend stream extraction and reply building."""

from .request_translator import translate, normalize_content
from .response_parser import extract, ResponseExtractor
from .response_assembler import assemble
from .chunk_builder import chunk_builder
from .network_manager import NetworkManager
from .openai_service import ChatCompletionService

__all__ = [
    "translate",
    "normalize_content",
    "extract",
    "ResponseExtractor",
    "assemble",
    "chunk_builder",
    "NetworkManager",
    "ChatCompletionService",
]
