from functools import lru_cache
import json
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# backend/.env, whatever the working directory of the server.
ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


def _parse_origins(raw: str) -> list[str]:
    """Accepts ``a,b,c`` or a JSON list."""
    text = raw.strip()
    if text.startswith("["):
        try:
            items = json.loads(text)
        except json.JSONDecodeError:
            items = None
        if isinstance(items, list):
            return [str(item).strip() for item in items if str(item).strip()]
    return [item.strip() for item in text.split(",") if item.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=str(ENV_FILE), env_file_encoding="utf-8", extra="ignore")

    project_name: str = "Horário Escolar API"
    api_prefix: str = "/api"

    database_url: str = "sqlite+pysqlite:///./horario-escolar.db"
    # Local setups get their tables at startup; production runs `alembic upgrade head`.
    auto_create_schema: bool = True

    jwt_secret_key: str = "troque-esta-chave"
    jwt_algorithm: str = "HS256"
    # Thirty days, the session lifetime school staff are used to.
    access_token_expire_minutes: int = 60 * 24 * 30

    # Full-timetable imports and snapshots are the largest bodies.
    max_request_size_bytes: int = 2_500_000

    snapshot_list_default_limit: int = 50
    snapshot_list_max_limit: int = 200
    audit_query_default_limit: int = 500

    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173", "http://localhost:3000"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return _parse_origins(value)
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
