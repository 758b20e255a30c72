"""Server configuration.

Loads settings from environment variables (and an optional ``.env`` file).
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings

PRODUCTION_BASE_URL = "https://api.gumroad.com"


class Settings(BaseSettings):
    """MCP Server settings."""

    gumroad_access_token: SecretStr | None = Field(
        default=None,
        description="Gumroad API access token",
    )
    gumroad_base_url: str = Field(
        default=PRODUCTION_BASE_URL,
        description="Gumroad base URL (override for staging hosts)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
    }
