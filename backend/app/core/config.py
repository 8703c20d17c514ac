# backend/app/core/config.py
from typing import List, Optional, Union
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

# Locate the .env file relative to the project root
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent  # Goes to nodecheck root
ENV_FILE = BASE_DIR / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=str(ENV_FILE), extra="ignore")

    # Application
    PROJECT_NAME: str = "NodeCheck"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./nodecheck.db"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10

    # CORS
    BACKEND_CORS_ORIGINS: Union[List[str], str] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    # Git hosting provider
    GITHUB_TOKEN: Optional[str] = None
    GIT_PROVIDER: str = "github"
    MANIFEST_PATH: str = "package.json"
    # Commits always target this branch, not the repository's default branch
    UPGRADE_BRANCH: str = "main"

    # npm registry
    NPM_REGISTRY_URL: str = "https://registry.npmjs.org"
    REGISTRY_TIMEOUT_SECONDS: float = 5.0
    AUDIT_TIMEOUT_SECONDS: float = 10.0

    @property
    def registry_base_url(self) -> str:
        return self.NPM_REGISTRY_URL.rstrip("/")

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL.startswith("postgresql://"):
            return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)
        return self.DATABASE_URL


settings = Settings()
