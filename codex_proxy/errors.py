"""
Proxy error taxonomy, rendered to clients as `{"error": {...}}` envelopes
"""

from typing import Any, Dict, Iterable, Optional


class ProxyError(Exception):
    """Base class for every error the proxy reports to its clients."""

    status_code: int = 502
    error_type: str = "proxy_error"
    code: str = "internal_error"
    param: Optional[str] = None

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {
            "message": self.message,
            "type": self.error_type,
        }
        if self.param is not None:
            error["param"] = self.param
        error["code"] = self.code
        return {"error": error}


class InvalidRequestBody(ProxyError):
    status_code = 400
    error_type = "invalid_request_error"
    code = "invalid_json"
    param = "body"

    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid JSON body: {detail}")


class ModelNotAllowed(ProxyError):
    status_code = 400
    error_type = "invalid_request_error"
    code = "model_not_allowed"
    param = "model"

    def __init__(self, model: str, allowed_models: Iterable[str]) -> None:
        self.model = model
        self.allowed_models = list(allowed_models)
        super().__init__(
            f"Model '{model}' is not allowed by this proxy. "
            f"Allowed models: {', '.join(self.allowed_models)}"
        )


class BackendHttpError(ProxyError):
    """The backend answered with a non-success status."""

    code = "upstream_error"

    def __init__(self, status: int, reason: str, body: str) -> None:
        self.status = status
        self.body = body
        status_line = f"{status} {reason}" if reason else str(status)
        super().__init__(f"Proxy error: ChatGPT backend returned {status_line} with body: {body}")


class EmptyContent(ProxyError):
    """The backend stream finished without any usable assistant text."""

    code = "empty_content"

    def __init__(self) -> None:
        super().__init__(
            "Proxy error: ChatGPT backend returned success but no assistant content could be extracted"
        )


class BackendTransportError(ProxyError):
    """Connection, TLS or DNS failure while talking to the backend."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Proxy error: Failed to send request to ChatGPT backend: {detail}")
