from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # App
    app_name: str = "Leaveflow"
    debug: bool = False

    # CORS
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # Database
    database_url: str = "sqlite:///./leaveflow.db"
    seed_default_users: bool = True

    # Workflow templates (YAML); built-in default chain when unset
    workflows_file: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    file_logging: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LEAVEFLOW_",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
