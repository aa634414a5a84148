"""Rematch Engine configuration — loads from environment and a local .env file."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


def _find_repo_root() -> Path:
    """Walk up from this file to find the repo root (where pyproject.toml lives)."""
    p = Path(__file__).resolve().parent
    while p != p.parent:
        if (p / "pyproject.toml").exists():
            return p
        p = p.parent
    return Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Application settings — populated from env vars or .env file."""

    # App
    app_name: str = "Rematch"
    app_version: str = "0.1.0"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database: an empty URL falls back to a local SQLite file when local_database is on
    database_url: str = ""
    local_database: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Paths
    repo_root: Path = _find_repo_root()

    model_config = {"env_prefix": "REMATCH_", "env_file": ".env"}

    @property
    def local_dir(self) -> Path:
        return self.repo_root / "local"

    @property
    def data_dir(self) -> Path:
        d = self.local_dir / "data"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @property
    def effective_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        if self.local_database:
            return f"sqlite:///{self.data_dir / 'rematch.db'}"
        return ""


settings = Settings()
