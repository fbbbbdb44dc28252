"""
Configuration module for loading environment variables and planner settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings loaded from DSTAR_* environment variables or a .env file."""

    # Grid Configuration
    grid_width: int = Field(20, gt=0)
    grid_height: int = Field(10, gt=0)

    # Navigation Configuration
    max_steps: int = Field(0, ge=0)  # 0 = width * height

    # Logging Configuration
    debug: bool = False
    log_format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    class Config:
        env_prefix = "DSTAR_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields in .env


# Global settings instance
settings = Settings()
