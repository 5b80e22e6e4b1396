"""Configuration module using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Resolver settings loaded from environment variables and .env file.

    Attributes:
        global_install: Requested installs are global and skip the
            sharing discipline of the placement planner.
        optional: Whether optional dependencies are attempted at all.
        shrinkwrap_filename: File name the shrinkwrap reader looks for in
            a node's directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="DEPTREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    global_install: bool = Field(
        default=False,
        description="Install requested packages globally",
    )
    optional: bool = Field(
        default=True,
        description="Attempt optional dependencies",
    )
    shrinkwrap_filename: str = Field(
        default="npm-shrinkwrap.json",
        description="Shrinkwrap file name next to a package",
    )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns:
        Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
