"""
FastAPI application factory
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastuuid import uuid4

from .config import ProxyConfig, Settings, load_proxy_config, settings as default_settings
from .errors import ProxyError
from .helpers import configure_structlog, get_logger, mask_secret
from .openai_api import router as openai_router
from .services.network_manager import NetworkManager
from .services.openai_service import ChatCompletionService

SERVICE_NAME = "codex-openai-proxy"

CORS_ALLOW_HEADERS = [
    "authorization",
    "content-type",
    "accept",
    "accept-encoding",
    "x-stainless-arch",
    "x-stainless-lang",
    "x-stainless-os",
    "x-stainless-package-version",
    "x-stainless-retry-count",
    "x-stainless-runtime",
    "x-stainless-runtime-version",
    "x-stainless-timeout",
]


def _log_request_headers(logger, request: Request) -> None:
    """Dump inbound headers at debug level, masking credentials."""
    headers = {}
    for name, value in request.headers.items():
        if name.lower() == "authorization":
            headers[name] = mask_secret(value)
        else:
            headers[name] = value
    logger.debug("🔍 请求头", header_count=len(headers), headers=headers)

    user_agent = request.headers.get("user-agent", "none").lower()
    if "vscode" in user_agent:
        logger.info("🎯 DETECTED: VS Code client")
    if "cline" in user_agent:
        logger.info("🎯 DETECTED: CLINE extension")


def create_app(
    config: Optional[ProxyConfig] = None,
    network: Optional[NetworkManager] = None,
    app_settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the proxy application.

    `config` and `network` are normally created at startup from settings;
    tests inject them to avoid touching auth.json or the real backend.
    """
    app_settings = app_settings or default_settings
    configure_structlog(app_settings.LOG_LEVEL)
    startup_logger = get_logger("codex_proxy")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        proxy_config = config or load_proxy_config(app_settings)
        network_manager = network or NetworkManager(proxy_url=app_settings.HTTPS_PROXY, logger=startup_logger)

        app.state.config = proxy_config
        app.state.network = network_manager
        app.state.service = ChatCompletionService(proxy_config, network_manager)

        startup_logger.info("✓ Loaded authentication", source=proxy_config.auth.source)
        startup_logger.info("✓ Allowed models", models=", ".join(proxy_config.allowed_models))
        startup_logger.info("🚀 Codex OpenAI Proxy ready", backend=proxy_config.backend_url)

        yield

        await network_manager.cleanup()
        startup_logger.info("应用已关闭")

    app = FastAPI(
        title="Codex OpenAI Proxy",
        description="OpenAI chat-completions front for the ChatGPT Codex Responses backend",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=CORS_ALLOW_HEADERS,
    )

    @app.middleware("http")
    async def request_logger(request: Request, call_next):
        request_id = str(uuid4())
        logger = get_logger(
            "codex_proxy.request",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        request.state.logger = logger
        logger.info("📥 收到请求")
        _log_request_headers(logger, request)

        response = await call_next(request)
        logger.info("📤 请求完成", status_code=response.status_code)
        return response

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError):
        logger = getattr(request.state, "logger", startup_logger)
        log = logger.warning if exc.status_code < 500 else logger.error
        log("❌ 请求失败", status_code=exc.status_code, code=exc.code, error=exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.get("/health")
    async def health():
        """Health check endpoint"""
        return {"status": "ok", "service": SERVICE_NAME}

    app.include_router(openai_router)

    return app
