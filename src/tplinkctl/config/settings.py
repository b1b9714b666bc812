from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from tplinkctl.models import DEFAULT_PORT

from .paths import default_config_path, expand_path

CONFIG_ENV_VAR = "TPLINKCTL_CONFIG"


class QueryConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    timeout: float | None = Field(default=None, gt=0)
    parallel_queries: int = Field(default=32, ge=1, le=255)


class DiscoveryConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    timeout: float = Field(default=3.0, gt=0)
    broadcast_address: str = "255.255.255.255"
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    query: QueryConfig = Field(default_factory=QueryConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def _toml_string(value: str) -> str:
    return json.dumps(value)


def render_settings_toml(settings: Settings) -> str:
    query = settings.query
    discovery = settings.discovery
    lines = [
        "# tplinkctl configuration",
        "",
        "[query]",
        f"port = {query.port}",
        f"parallel_queries = {query.parallel_queries}",
    ]
    if query.timeout is None:
        lines.append("# timeout = 10.0")
    else:
        lines.append(f"timeout = {query.timeout}")
    lines += [
        "",
        "[discovery]",
        f"timeout = {discovery.timeout}",
        f"broadcast_address = {_toml_string(discovery.broadcast_address)}",
        f"port = {discovery.port}",
        "",
    ]
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
