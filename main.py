#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Main application entry point - Codex OpenAI proxy
"""

import argparse

from codex_proxy.config import settings
from codex_proxy.server import create_app


app = create_app()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="OpenAI-compatible proxy for the ChatGPT Codex backend")
    parser.add_argument("-p", "--port", type=int, default=settings.LISTEN_PORT, help="Port to listen on")
    parser.add_argument(
        "--auth-path",
        default=settings.AUTH_PATH,
        help="Path to Codex auth.json file",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    import uvicorn

    args = parse_args()
    app_settings = settings.model_copy(update={"LISTEN_PORT": args.port, "AUTH_PATH": args.auth_path})

    uvicorn.run(
        create_app(app_settings=app_settings),
        host="0.0.0.0",
        port=args.port,
        http="httptools",
        reload=False,
        log_level="info",
    )
