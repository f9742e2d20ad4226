"""
Configuration for the Autokatalog service.

Uses pydantic-settings for environment variable loading.
"""

from functools import lru_cache
from typing import Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Service configuration loaded from environment."""

    # Database
    database_url: str = Field(default="sqlite:///./autokatalog.db", description="SQLAlchemy database URL")
    echo_sql: bool = Field(default=False, description="Log every SQL statement")
    create_schema: bool = Field(default=True, description="Create missing tables on startup")

    # REST
    rest_path: str = Field(default="/rest", description="Path prefix of the REST surface")
    cors_origins: List[str] = Field(default=["*"])

    # GraphQL
    graphql_path: str = Field(default="/graphql", description="Path of the GraphQL endpoint")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="text", description="text or json")

    # Bearer token -> roles, e.g. AUTOKATALOG_TOKENS='{"secret": ["admin", "user"]}'
    tokens: Dict[str, List[str]] = Field(default_factory=dict)

    model_config = {"env_prefix": "AUTOKATALOG_"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
