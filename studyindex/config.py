"""Application configuration loaded from environment variables."""

from pathlib import Path
from typing import Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    corpus_root: str = Field(
        default="docs", description="Root directory of the Markdown study notes."
    )
    file_extensions: List[str] = Field(default_factory=lambda: [".md"])
    skip_hidden: bool = True

    min_token_length: int = 2
    level_boosts: Dict[int, float] = Field(
        default_factory=lambda: {1: 1.0, 2: 1.0, 3: 0.95, 4: 0.9, 5: 0.85, 6: 0.8}
    )
    default_search_limit: int = 20

    documents_export_path: str = "data/parsed/documents.jsonl"
    build_on_startup: bool = True
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def corpus_root_path(self) -> Path:
        return Path(self.corpus_root)

    @property
    def documents_export_path_obj(self) -> Path:
        return Path(self.documents_export_path)


settings = Settings()
