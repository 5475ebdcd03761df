"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, tasklistctl.toml only contains overrides.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    path: Path = Path(".tasklistctl") / "tasklist.db"
    busy_timeout: float = Field(default=30.0, gt=0)
    backup_max_count: int = Field(default=10, ge=1)


class SearchConfig(BaseModel):
    """[search] section."""

    model_config = {"frozen": True}

    max_results: int = Field(default=1000, ge=1)
    default_limit: int = Field(default=50, ge=1)
    suggestion_min_length: int = Field(default=2, ge=1)
    suggestion_limit: int = Field(default=10, ge=1)


class TasksConfig(BaseModel):
    """[tasks] section."""

    model_config = {"frozen": True}

    title_max_length: int = Field(default=500, ge=1)


class McpConfig(BaseModel):
    """[mcp] section."""

    model_config = {"frozen": True}

    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000
