from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "AI Mock Interview Backend"
    api_prefix: str = "/api"
    project_url: str = "http://localhost:3000"

    vapi_workflow_id: Optional[str] = None

    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"

    database_url: str = "sqlite:////tmp/interview.db"
    log_level: str = "INFO"

    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]

    @property
    def is_production(self) -> bool:
        return not self.database_url.startswith("sqlite")

    def absolute_url(self, path: str) -> str:
        return f"{self.project_url.rstrip('/')}{path}"


settings = Settings()
