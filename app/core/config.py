from typing import List

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application Information
    app_name: str = Field(default="Mercari Catalog")
    app_description: str = Field(default="Item catalog with content-addressed images")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    production: bool = Field(default=False)

    # Database Configuration
    database_url: str = Field(default="sqlite:///./db/mercari.sqlite3")
    db_pool_size: int = Field(default=5)
    db_max_overflow: int = Field(default=10)
    db_pool_timeout: int = Field(default=30)
    db_busy_timeout: float = Field(default=5.0)
    db_lock_retries: int = Field(default=5)

    # Image Storage
    image_dir: str = Field(default="images")
    default_image_name: str = Field(default="default.jpg")
    image_extension: str = Field(default=".jpg")
    max_image_size_mb: int = Field(default=5)

    # Security Settings
    front_url: str = Field(default="http://localhost:3000")
    cors_allowed_origins: List[str] = Field(default=[])
    rate_limit_storage_uri: str = Field(default="memory://")
    health_rate_limit: str = Field(default="10/minute")

    # Logging
    log_level: str = Field(default="info")
    log_dir: str = Field(default="logs")
    log_file: str = Field(default="app.log")

    # ============================
    # Generic comma-separated parser
    # ============================
    @staticmethod
    def _parse_csv(value, default):
        if isinstance(value, str):
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default
        if isinstance(value, list):
            return value
        return default

    @field_validator("cors_allowed_origins", mode="before")
    def validate_cors(cls, v):
        return cls._parse_csv(v, [])

    @field_validator("image_extension")
    def validate_extension(cls, v):
        v = v.strip().lower()
        return v if v.startswith(".") else f".{v}"

    @property
    def allowed_origins(self) -> List[str]:
        """Frontend origin first, then any extra configured origins."""
        origins = [self.front_url]
        origins.extend(o for o in self.cors_allowed_origins if o != self.front_url)
        return origins

    @property
    def max_image_size(self) -> int:
        return self.max_image_size_mb * 1024 * 1024

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_settings():
    try:
        return Settings()
    except ValidationError as e:
        print("Settings validation error:", e)
        raise


settings = load_settings()
