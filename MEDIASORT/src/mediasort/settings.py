"""Sorter configuration (``MEDIASORT_*`` environment variables and .env files)."""

from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from common.config import BaseConfig, load_config

DEFAULT_FOLDER_PATTERN = "%Y/%Y-%m/%Y-%m-%d"

# Ordered slot table for the exiftool backend: slot i is named exiftool_tags[i]
DEFAULT_EXIFTOOL_TAGS = [
    "FileName",
    "FileSize",
    "FileModifyDate",
    "FileCreateDate",
    "DateTimeOriginal",
    "CreateDate",
    "ModifyDate",
    "DateCreated",
    "MediaCreateDate",
    "MediaModifyDate",
    "TrackCreateDate",
    "TrackModifyDate",
    "Artist",
    "Model",
    "ImageWidth",
    "ImageHeight",
]

DEFAULT_EXIFTOOL_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class SorterSettings(BaseConfig):
    """Settings for the media sorter.

    Labels and the slot count default to ``None``, meaning "use whatever the
    selected metadata backend considers canonical".
    """

    metadata_backend: str = Field(
        default="auto", description="Metadata backend: auto, shell, exiftool"
    )
    slot_count: Optional[int] = Field(
        default=None, description="Exclusive upper bound of property slots to scan"
    )
    date_taken_label: Optional[str] = Field(
        default=None, description="Canonical property name for 'date taken'"
    )
    media_created_label: Optional[str] = Field(
        default=None, description="Canonical property name for 'media created'"
    )
    date_name_patterns: List[str] = Field(
        default_factory=lambda: ["date", "created"],
        description="Case-insensitive substrings marking other date properties",
    )

    shell_reference_dir: Optional[Path] = Field(
        default=None, description="Folder used to enumerate Shell property names"
    )
    exiftool_path: str = Field(default="exiftool", description="exiftool executable")
    exiftool_tags: List[str] = Field(default_factory=lambda: list(DEFAULT_EXIFTOOL_TAGS))
    exiftool_date_format: str = Field(default=DEFAULT_EXIFTOOL_DATE_FORMAT)

    day_first: Optional[bool] = Field(
        default=None, description="Override the locale's day/month ordering"
    )
    year_first: Optional[bool] = Field(
        default=None, description="Override the locale's year-first ordering"
    )

    folder_pattern: str = Field(default=DEFAULT_FOLDER_PATTERN)
    destination_name: str = Field(
        default="Sorted", description="Destination folder created inside the source"
    )
    media_only: bool = Field(
        default=True, description="Only sort image and video files"
    )

    model_config = SettingsConfigDict(
        env_prefix="MEDIASORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("metadata_backend")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("auto", "shell", "exiftool"):
            raise ValueError(f"unknown metadata backend '{value}'")
        return value

    @field_validator("slot_count")
    @classmethod
    def _check_slot_count(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("slot_count must be positive")
        return value

    @field_validator("date_name_patterns")
    @classmethod
    def _check_patterns(cls, value: List[str]) -> List[str]:
        patterns = [p for p in value if p]
        if not patterns:
            raise ValueError("date_name_patterns must not be empty")
        return patterns


def load_settings(project_path: Optional[Path] = None, env: str = "dev") -> SorterSettings:
    """Load sorter settings from ``.env.<env>`` / ``.env`` and the environment."""
    return load_config(project_path, env, config_class=SorterSettings)
