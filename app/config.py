from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.aopenai import DEFAULT_MODEL
from domain.models import DEFAULT_CATEGORY
from domain.pipeline import PipelineVariant


DEFAULT_JWT_SECRET = "CHANGE_THIS_TO_A_SUPER_COMPLEX_KEY_IN_ENV"


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: Env = Env.local
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    db_url: str = "sqlite+aiosqlite:///chefbot.db"

    jwt_secret: str = DEFAULT_JWT_SECRET
    token_ttl_hours: float = 24

    openai_api_key: str | None = None
    openai_base_url: str | None = None
    core_model: str = DEFAULT_MODEL
    llm_timeout_seconds: float = 30
    pipeline_variant: PipelineVariant = PipelineVariant.guarded
    default_category: str = DEFAULT_CATEGORY

    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60
    trust_forwarded_for: bool = False

    cors_origins: list[str] = ["*"]
    static_dir: Path = Path("public")
