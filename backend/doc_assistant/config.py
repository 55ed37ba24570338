"""Configuration management for the application."""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Configuration
    app_env: str = "development"
    log_level: str = "INFO"
    app_insights_connection_string: Optional[str] = None
    cors_allowed_origins: List[str] = ["*"]

    # Database Configuration
    database_url: str = "sqlite+aiosqlite:///./doc_assistant.db"

    # Text generation (llama-server or any OpenAI-compatible completion endpoint)
    # Provider "azure" switches to Azure AI Foundry using the azure_foundry_* values.
    generation_provider: str = "openai_compatible"
    generation_base_url: Optional[str] = "http://localhost:8080/v1"
    generation_api_key: str = "not-needed"
    generation_model: str = "mistral-7b-local"
    azure_foundry_endpoint: Optional[str] = None
    azure_foundry_api_key: Optional[str] = None
    azure_foundry_api_version: str = "2024-05-01-preview"
    azure_foundry_deployment_name: Optional[str] = None
    generation_timeout_seconds: float = 60.0
    generation_temperature: float = 0.7
    generation_max_tokens: int = 512

    # Search summary generation (companion search endpoint)
    summary_timeout_seconds: float = 10.0
    summary_temperature: float = 0.5
    summary_max_tokens: int = 100

    # Azure AI Search (documentation index)
    azure_search_endpoint: Optional[str] = None
    azure_search_key: Optional[str] = None
    azure_search_index_name: str = "doc-pages"
    search_timeout_seconds: float = 3.0
    search_hit_limit: int = 10  # oversampled; reranker keeps ranked_keep
    ranked_keep: int = 6

    # Request bounds
    max_message_length: int = 2000
    history_turns_in_prompt: int = 4
    max_context_chars: int = 6000

    health_check_timeout_seconds: float = 2.0

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
