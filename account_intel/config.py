"""Application configuration using pydantic-settings pattern."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Account Intelligence Service"
    app_version: str = "0.1.0"
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Seller-owned email domains, excluded from the participant registry
    internal_domains: list[str] = Field(
        default_factory=lambda: ["runlayer.com", "anysourcehq.com"],
        description="Email domains that belong to our own organization",
    )

    # Dossier generation
    dossier_version: str = Field(default="1.0")
    days_of_history: int = Field(
        default=30,
        ge=1,
        description="Default look-back window for source collection",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def generated_by(self) -> str:
        """Generator label stamped into dossier metadata."""
        return f"{self.app_name} v{self.app_version}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
