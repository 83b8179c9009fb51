import os
from pathlib import Path
from typing import Dict

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .rules import LORE_BASE_YEAR, STARTING_RESOURCES

# Load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from ``DEEPHEX_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DEEPHEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    allowed_origins: str = Field(
        default="http://localhost:3000", description="CORS allowed origins"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (console or json)")

    # World Generation Configuration
    default_map_width: int = Field(default=25, description="Default map width in hexes")
    default_map_height: int = Field(default=25, description="Default map height in hexes")
    max_map_width: int = Field(default=120, description="Max allowed map width")
    max_map_height: int = Field(default=120, description="Max allowed map height")
    lore_base_year: int = Field(default=LORE_BASE_YEAR, description="Year of the founding beat")

    # Economy
    starting_resources: Dict[str, int] = Field(
        default_factory=lambda: dict(STARTING_RESOURCES),
        description="Initial player resource pool",
    )

    @property
    def origins(self):
        """CORS origins as a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


# Instantiate singleton settings object
settings = Settings()
