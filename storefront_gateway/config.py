# storefront_gateway/config.py
import logging
import re
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

STORE_DOMAIN_PATTERN = re.compile(r"^[a-zA-Z0-9-]+\.myshopify\.com$")
API_VERSION_PATTERN = re.compile(r"^20\d{2}-\d{2}$")


class Config(BaseSettings):
    """Configuration settings for the storefront gateway."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=True,
        env_file_encoding='utf-8',
        extra='ignore'
    )

    app_name: str = "storefront_gateway"

    # Shopify Storefront settings (tokenless access, no credentials)
    SHOPIFY_STORE_DOMAIN: str = Field(default="", validate_default=True)
    SHOPIFY_API_VERSION: str = Field(default="2024-04")
    SHOPIFY_REQUEST_TIMEOUT: float = Field(default=5.0, gt=0)

    ENVIRONMENT: Literal["development", "production", "test"] = Field(default="development")
    LOG_LEVEL: str = Field(default="INFO")
    DEBUG_LOG_CAPACITY: int = Field(default=50, ge=1)

    @field_validator("SHOPIFY_STORE_DOMAIN")
    @classmethod
    def check_store_domain(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("SHOPIFY_STORE_DOMAIN is required")
        if not STORE_DOMAIN_PATTERN.match(value):
            raise ValueError(
                "SHOPIFY_STORE_DOMAIN must be a valid Shopify store domain "
                "(e.g., mystore.myshopify.com)"
            )
        return value

    @field_validator("SHOPIFY_API_VERSION")
    @classmethod
    def check_api_version(cls, value: str) -> str:
        if not API_VERSION_PATTERN.match(value):
            raise ValueError("SHOPIFY_API_VERSION must be in format YYYY-MM")
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {value!r}")
        return level

    @property
    def storefront_endpoint(self) -> str:
        return f"https://{self.SHOPIFY_STORE_DOMAIN}/api/{self.SHOPIFY_API_VERSION}/graphql.json"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_test(self) -> bool:
        return self.ENVIRONMENT == "test"


def load_config(**overrides) -> Config:
    """
    Build the Config from the environment and fail with every problem listed.

    Args:
        overrides: Field values that take precedence over the environment

    Returns:
        Validated Config

    Raises:
        ConfigurationError: If any setting is missing or malformed
    """
    try:
        return Config(**overrides)
    except ValidationError as e:
        issues = "\n".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise ConfigurationError(f"Environment validation failed:\n{issues}") from e
