import asyncio
import json

import httpx
import pytest

from codex_proxy.errors import ModelNotAllowed
from codex_proxy.helpers import get_logger
from codex_proxy.schemas import ChatRequest
from codex_proxy.services.openai_service import ChatCompletionService

from .conftest import BACKEND_URL, delta, item_done, sse_body


CHAT_PATHS = ["/chat/completions", "/v1/chat/completions"]


def _chat(client, path="/v1/chat/completions", **overrides):
    payload = {"model": "gpt-5", "messages": [{"role": "user", "content": "hello"}], "stream": False}
    payload.update(overrides)
    return client.post(path, json=payload)


def _frames(body: str) -> list[str]:
    return [f"{part}\n\n" for part in body.split("\n\n") if part]


class TestHealthAndModels:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "codex-openai-proxy"}

    @pytest.mark.parametrize("path", ["/models", "/v1/models"])
    def test_models(self, client, path):
        response = client.get(path)
        assert response.status_code == 200
        body = response.json()
        assert body["object"] == "list"
        assert [m["id"] for m in body["data"]] == ["gpt-5", "gpt-5.2-codex"]
        assert all(m["object"] == "model" and m["owned_by"] == "openai" for m in body["data"])

    def test_unknown_route(self, client):
        assert client.get("/v1/unknown").status_code == 404

    def test_cors_preflight(self, client):
        response = client.options(
            "/v1/chat/completions",
            headers={
                "Origin": "vscode-webview://cline",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization,content-type,x-stainless-os",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"


class TestNonStreaming:

    @pytest.mark.parametrize("path", CHAT_PATHS)
    def test_end_to_end(self, client, backend, path):
        response = _chat(client, path)

        assert response.status_code == 200
        body = response.json()
        assert body["object"] == "chat.completion"
        assert body["model"] == "gpt-5"
        assert body["choices"][0]["message"] == {"role": "assistant", "content": "Hi there"}
        assert body["choices"][0]["finish_reason"] == "stop"
        assert body["usage"] == {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}

        assert len(backend.calls) == 1
        sent = backend.last_json()
        assert sent["input"] == [
            {"type": "message", "role": "user", "content": [{"type": "input_text", "text": "hello"}]}
        ]
        assert sent["tool_choice"] == "auto"
        assert sent["stream"] is True

    def test_outbound_request_headers(self, client, backend):
        _chat(client)
        _chat(client)

        first, second = backend.calls
        assert str(first.url) == BACKEND_URL
        assert first.method == "POST"
        assert first.headers["authorization"] == "Bearer access-123"
        assert first.headers["chatgpt-account-id"] == "acct-456"
        assert first.headers["accept"] == "text/event-stream"
        assert first.headers["originator"] == "codex_cli_rs"
        assert first.headers["session_id"] != second.headers["session_id"]

    def test_item_done_fallback(self, client, backend):
        backend.body = sse_body({"type": "response.created"}, item_done("a"), item_done("b"))
        assert _chat(client).json()["choices"][0]["message"]["content"] == "ab"

    def test_response_ids_are_fresh(self, client):
        assert _chat(client).json()["id"] != _chat(client).json()["id"]


class TestStreaming:

    def test_four_frames(self, client, backend):
        response = _chat(client, stream=True)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"

        frames = _frames(response.text)
        assert len(frames) == 4
        assert frames[-1] == "data: [DONE]\n\n"

        content = json.loads(frames[1][len("data: "):])
        assert content["choices"][0]["delta"]["content"] == "Hi there"
        assert content["model"] == "gpt-5"

        # The backend is still consumed as an event stream.
        assert backend.last_json()["stream"] is True

    def test_backend_failure_is_json_error_not_stream(self, client, backend):
        backend.status_code = 500
        backend.body = "upstream exploded"

        response = _chat(client, stream=True)

        assert response.status_code == 502
        assert response.headers["content-type"].startswith("application/json")
        assert response.json()["error"]["code"] == "upstream_error"


class TestErrors:

    @pytest.mark.parametrize("path", CHAT_PATHS)
    def test_invalid_json(self, client, backend, path):
        response = client.post(path, content=b"{not json", headers={"content-type": "application/json"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "invalid_request_error"
        assert error["param"] == "body"
        assert error["code"] == "invalid_json"
        assert error["message"].startswith("Invalid JSON body:")
        assert backend.calls == []

    def test_wrong_shape_is_invalid_body(self, client, backend):
        response = client.post("/v1/chat/completions", json={"model": "gpt-5"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_json"
        assert "messages" in response.json()["error"]["message"]
        assert backend.calls == []

    @pytest.mark.parametrize("stream", [False, True])
    def test_model_not_allowed_makes_no_backend_call(self, client, backend, stream):
        response = _chat(client, model="gpt-4o", stream=stream)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error == {
            "message": "Model 'gpt-4o' is not allowed by this proxy. Allowed models: gpt-5, gpt-5.2-codex",
            "type": "invalid_request_error",
            "param": "model",
            "code": "model_not_allowed",
        }
        assert backend.calls == []

    def test_backend_http_error(self, client, backend):
        backend.status_code = 401
        backend.body = '{"detail":"Unauthorized"}'

        response = _chat(client)

        assert response.status_code == 502
        error = response.json()["error"]
        assert error["type"] == "proxy_error"
        assert error["code"] == "upstream_error"
        assert "401" in error["message"]
        assert '{"detail":"Unauthorized"}' in error["message"]
        assert "param" not in error
        assert len(backend.calls) == 1

    def test_empty_content(self, client, backend):
        backend.body = sse_body({"type": "response.created"}, {"type": "response.completed"})

        response = _chat(client)

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "empty_content"

    def test_transport_error(self, client, backend):
        backend.raise_error = httpx.ConnectError("connection refused")

        response = _chat(client)

        assert response.status_code == 502
        error = response.json()["error"]
        assert error["code"] == "internal_error"
        assert "connection refused" in error["message"]
        assert len(backend.calls) == 1

    def test_errors_are_not_retried(self, client, backend):
        backend.status_code = 503
        backend.body = "busy"

        _chat(client)

        assert len(backend.calls) == 1

    def test_delta_precedence_end_to_end(self, client, backend):
        backend.body = sse_body(item_done("full text"), delta("only"), delta(" deltas"))
        assert _chat(client).json()["choices"][0]["message"]["content"] == "only deltas"


class TestUnauthenticatedBackend:

    @pytest.fixture
    def proxy_config(self):
        from codex_proxy.config import ProxyConfig

        return ProxyConfig(allowed_models=("gpt-5",), backend_url=BACKEND_URL)

    def test_no_auth_headers(self, client, backend):
        assert _chat(client).status_code == 200
        assert "authorization" not in backend.calls[0].headers
        assert "chatgpt-account-id" not in backend.calls[0].headers


class TestServiceModelCheck:

    def test_direct_service_call_rejects_model_before_network(self, proxy_config, network, backend):
        service = ChatCompletionService(proxy_config, network)
        request = ChatRequest.model_validate({"model": "gpt-4o", "messages": [{"role": "user", "content": "hi"}]})

        with pytest.raises(ModelNotAllowed):
            asyncio.run(service.fetch_assistant_text(request, get_logger("test")))
        assert backend.calls == []
