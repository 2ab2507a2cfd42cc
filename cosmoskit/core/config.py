"""
Centralised settings for the Cosmos DB access layer, loaded from environment / .env file.
"""
from __future__ import annotations

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env from project root (two levels up from this file)
_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseSettings):
    # ── Cosmos account ───────────────────────────────────
    # AccountEndpoint=https://xxx.documents.azure.com:443/;AccountKey=xxx==;
    cosmosdb_connection_string: str = ""
    cosmos_database: str = "CosmosDB"
    cosmos_consistency_level: str = "Session"

    # ── Queries ──────────────────────────────────────────
    default_page_limit: int = 100

    # ── App ──────────────────────────────────────────────
    log_level: str = "INFO"

    @property
    def has_connection_string(self) -> bool:
        return bool(self.cosmosdb_connection_string.strip())

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()
