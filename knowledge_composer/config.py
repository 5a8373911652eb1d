"""
Configuration module for Knowledge Composer.

Uses pydantic-settings for configuration management with environment variable support.
Environment variables use KNOWLEDGE_COMPOSER_ prefix (e.g., KNOWLEDGE_COMPOSER_MODULES_PATH).
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Section families every knowledge module must provide, in canonical report order.
# An entry containing " or " lists alternatives: any one of them satisfies the family.
DEFAULT_REQUIRED_SECTIONS = [
    "Key Concepts",
    "Common Patterns",
    "Implementation Details",
    "Validation Methods or Troubleshooting",
    "Authoritative References",
]

DEFAULT_REFERENCE_MARKER = "@"


def _get_default_modules_path() -> Path:
    """Get default knowledge module directory."""
    return Path.home() / "Documents" / "Knowledge" / "modules"


class Settings(BaseSettings):
    """Application settings with environment variable support.

    Environment variables:
    - KNOWLEDGE_COMPOSER_MODULES_PATH: Directory holding the knowledge modules
    - KNOWLEDGE_COMPOSER_MODULE_EXTENSION: File extension of module documents
    - KNOWLEDGE_COMPOSER_REFERENCE_MARKER: Prefix marking a module reference
    - KNOWLEDGE_COMPOSER_REQUIRED_SECTIONS: JSON list of required section families
    - KNOWLEDGE_COMPOSER_MAX_CONCURRENCY: Maximum simultaneous module reads
    - KNOWLEDGE_COMPOSER_RESOLVE_TIMEOUT: Per-reference deadline in seconds
    - KNOWLEDGE_COMPOSER_MAX_MODULE_SIZE: Maximum module size in bytes
    """

    modules_path: Path = Field(default_factory=_get_default_modules_path)
    module_extension: str = ".md"
    reference_marker: str = DEFAULT_REFERENCE_MARKER
    required_sections: list[str] = Field(default_factory=lambda: list(DEFAULT_REQUIRED_SECTIONS))
    max_concurrency: int = Field(default=8, ge=1)
    resolve_timeout: float | None = None
    max_module_size: int = 1 * 1024 * 1024  # 1MB in bytes

    model_config = SettingsConfigDict(env_prefix="KNOWLEDGE_COMPOSER_")

    @field_validator("reference_marker")
    @classmethod
    def _check_marker(cls, value: str) -> str:
        if not value or any(ch.isspace() for ch in value):
            raise ValueError("reference_marker must be non-empty and contain no whitespace")
        return value


# Global settings instance
settings = Settings()
