"""
Configuration module for Knowledge Graph MCP.

This module handles loading configuration from environment variables and provides
a settings object that can be used throughout the application.
"""

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Graph backend: "neo4j" for production, "memory" for local development
    graph_backend: Literal["neo4j", "memory"] = "neo4j"

    # Neo4j Configuration
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"
    neo4j_database: Optional[str] = None

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    log_level: str = "INFO"

    # Application Configuration
    app_name: str = "Knowledge Graph MCP"
    app_version: str = "0.1.0"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings.

    Returns:
        Settings object with configuration values
    """
    return Settings()
