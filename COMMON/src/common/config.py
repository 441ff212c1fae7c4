"""Common configuration management using Pydantic."""

import os
from pathlib import Path
from typing import Optional, Type, TypeVar
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv


class BaseConfig(BaseSettings):
    """Base configuration class for all projects."""

    # Environment settings
    environment: str = Field(default="dev", description="Environment: dev, test, prod")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Logging settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    log_file: Optional[str] = Field(default=None, description="Log file path")
    log_dir: str = Field(default=".log", description="Directory for script logs")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


ConfigT = TypeVar("ConfigT", bound=BaseConfig)


def load_env_files(project_path: Optional[Path] = None, env: str = "dev") -> None:
    """Load the environment-specific .env file into the process environment.

    ``.env.<env>`` wins over ``.env``; variables already present in the
    environment are never overwritten.
    """
    if project_path is None:
        project_path = Path.cwd()

    env_file = project_path / f".env.{env}"
    if env_file.exists():
        load_dotenv(env_file)
    else:
        default_env = project_path / ".env"
        if default_env.exists():
            load_dotenv(default_env)

    os.environ["ENVIRONMENT"] = env


def load_config(
    project_path: Optional[Path] = None,
    env: str = "dev",
    config_class: Type[ConfigT] = BaseConfig,
) -> ConfigT:
    """Load configuration for a project.

    Args:
        project_path: Path to the project directory
        env: Environment to load (dev, test, prod)
        config_class: Settings class to instantiate

    Returns:
        Loaded configuration instance
    """
    load_env_files(project_path, env)
    return config_class()
