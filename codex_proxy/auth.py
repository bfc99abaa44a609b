#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Codex auth.json 凭据加载
"""

from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class CredentialsError(RuntimeError):
    """auth.json could not be read or parsed."""


class TokenData(BaseModel):
    """ChatGPT login token pair"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str
    account_id: str
    refresh_token: Optional[str] = None


class AuthData(BaseModel):
    """Codex auth.json structure"""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    tokens: Optional[TokenData] = None

    @property
    def source(self) -> str:
        if self.tokens is not None:
            return "tokens"
        if self.api_key:
            return "api_key"
        return "none"

    def authorization_headers(self) -> Dict[str, str]:
        """
        Auth headers for the backend call.

        Token pair wins over the raw API key; with neither the request goes
        out unauthenticated.
        """
        if self.tokens is not None:
            return {
                "Authorization": f"Bearer {self.tokens.access_token}",
                "chatgpt-account-id": self.tokens.account_id,
            }
        if self.api_key:
            return {"Authorization": f"Bearer {self.api_key}"}
        return {}


def expand_auth_path(path: str) -> Path:
    """Expand a leading ~/ to the current user's home directory."""
    return Path(path).expanduser()


def load_auth(path: str) -> AuthData:
    auth_path = expand_auth_path(path)
    try:
        raw = auth_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CredentialsError(f"Failed to read auth.json at {auth_path}: {exc}") from exc

    try:
        return AuthData.model_validate_json(raw)
    except ValidationError as exc:
        raise CredentialsError(f"Failed to parse auth.json at {auth_path}: {exc}") from exc
