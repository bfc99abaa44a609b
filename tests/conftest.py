import json
from typing import Callable, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from codex_proxy.auth import AuthData, TokenData
from codex_proxy.config import ProxyConfig, Settings
from codex_proxy.server import create_app
from codex_proxy.services.network_manager import NetworkManager


BACKEND_URL = "https://backend.test/backend-api/codex/responses"


def sse_body(*events: dict, done: bool = True) -> str:
    """Render backend events the way the Responses API streams them."""
    lines = [f"event: {event.get('type', 'message')}\ndata: {json.dumps(event)}\n\n" for event in events]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines)


def delta(text: str) -> dict:
    return {"type": "response.output_text.delta", "delta": text}


def item_done(*texts: str) -> dict:
    return {
        "type": "response.output_item.done",
        "item": {
            "type": "message",
            "role": "assistant",
            "content": [{"type": "output_text", "text": t} for t in texts],
        },
    }


class FakeBackend:
    """Stands in for the Codex backend and records every call made to it."""

    def __init__(self) -> None:
        self.calls: List[httpx.Request] = []
        self.status_code = 200
        self.body = sse_body(delta("Hi"), delta(" there"))
        self.raise_error: Optional[Exception] = None
        self.responder: Optional[Callable[[httpx.Request], httpx.Response]] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        if self.responder is not None:
            return self.responder(request)
        return httpx.Response(
            self.status_code,
            text=self.body,
            headers={"content-type": "text/event-stream"},
        )

    def last_json(self) -> dict:
        return json.loads(self.calls[-1].content)


@pytest.fixture
def token_auth() -> AuthData:
    return AuthData(tokens=TokenData(access_token="access-123", account_id="acct-456"))


@pytest.fixture
def proxy_config(token_auth) -> ProxyConfig:
    return ProxyConfig(
        allowed_models=("gpt-5", "gpt-5.2-codex"),
        backend_url=BACKEND_URL,
        auth=token_auth,
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def network(backend) -> NetworkManager:
    return NetworkManager(client=httpx.AsyncClient(transport=httpx.MockTransport(backend.handler)))


@pytest.fixture
def client(proxy_config, network):
    app = create_app(config=proxy_config, network=network, app_settings=Settings(LOG_LEVEL="false"))
    with TestClient(app) as test_client:
        yield test_client
