"""
Application settings and configuration.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application configuration settings."""

    # Application settings
    app_name: str = "BuildTrack"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    environment: str = "development"

    # FastAPI settings
    api_host: str = "0.0.0.0"
    api_port: int = 5001
    cors_origins: List[str] = ["http://localhost:5173"]

    # Azure Storage settings
    azure_storage_connection_string: str = ""
    azure_storage_container_name: str = "buildtrack-documents"
    documents_folder: str = "project_documents"
    covers_folder: str = "project_covers"
    max_document_size_mb: int = 25
    max_image_size_mb: int = 5

    # Blueprint analysis settings
    blueprint_provider: str = "gemini"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    gemini_endpoint: str = "https://generativelanguage.googleapis.com/v1beta/models"

    # Azure OpenAI settings
    azure_openai_endpoint: str = ""
    azure_openai_api_key: str = ""
    azure_openai_api_version: str = "2024-02-01"
    azure_openai_deployment_name: str = "gpt-4o"

    http_timeout_seconds: float = 60.0

    @property
    def max_document_size_bytes(self) -> int:
        return self.max_document_size_mb * 1024 * 1024

    @property
    def max_image_size_bytes(self) -> int:
        return self.max_image_size_mb * 1024 * 1024

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Returns a cached instance of the application settings."""
    return Settings()
