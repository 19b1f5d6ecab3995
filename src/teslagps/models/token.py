"""Access token model."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from teslagps.exceptions import ClientInitError, ConfigError


class AccessToken(BaseModel):
    """Owner-API token read from the ``--token`` file.

    The file is either the JSON document written by the usual Tesla
    token tools (``{"access_token": ..., "refresh_token": ..., ...}``)
    or a bare access-token string. Only ``access_token`` is used;
    refreshing is left to the tool that produced the file.

    Parameters
    ----------
    access_token : str
        Bearer token sent with every request.
    token_type : str
        Token type, normally ``"Bearer"``.
    refresh_token : str or None
        Refresh token, kept for completeness.
    expiry : datetime or None
        Expiry instant if the file records one.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str = Field(min_length=1)
    token_type: str = "Bearer"
    refresh_token: str | None = None
    expiry: datetime | None = None

    @field_validator("access_token")
    @classmethod
    def _strip(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("access_token must be non-empty")
        return stripped

    def __repr__(self) -> str:
        return f"AccessToken(token_type={self.token_type!r}, expiry={self.expiry!r})"

    @classmethod
    def from_file(cls, path: str | Path) -> AccessToken:
        """Load a token file.

        Raises
        ------
        ConfigError
            The file cannot be read.
        ClientInitError
            The file does not contain a usable access token.
        """
        token_path = Path(path).expanduser()
        try:
            text = token_path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read token file {token_path}: {exc}") from exc

        data: Any
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            data = {"access_token": text}
        if isinstance(data, str):
            data = {"access_token": data}
        if not isinstance(data, dict):
            raise ClientInitError(f"Token file {token_path} does not hold a token object")

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ClientInitError(f"Token file {token_path} has no usable access_token") from exc
