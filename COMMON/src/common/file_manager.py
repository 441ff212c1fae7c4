"""
File type classification for media files.

Single source of truth for the image and video extensions the sorter treats as
media. Matching is case-insensitive on the final suffix.
"""

from pathlib import Path
from typing import FrozenSet


class FileManager:
    """Classifies files as image, video or other."""

    IMAGE_EXTENSIONS: FrozenSet[str] = frozenset(
        {
            ".jpg", ".jpeg", ".jpe", ".png", ".gif", ".bmp",
            ".tif", ".tiff", ".webp", ".heic", ".heif", ".avif",
            # camera raw formats
            ".raw", ".dng", ".cr2", ".cr3", ".nef", ".arw",
            ".orf", ".rw2", ".pef", ".srw", ".raf", ".x3f",
        }
    )

    VIDEO_EXTENSIONS: FrozenSet[str] = frozenset(
        {
            ".mp4", ".m4v", ".mov", ".qt", ".avi", ".mkv", ".wmv",
            ".asf", ".flv", ".webm", ".3gp", ".3g2", ".mpg", ".mpeg",
            ".mts", ".m2ts", ".ts", ".vob",
        }
    )

    @classmethod
    def get_all_media_extensions(cls) -> FrozenSet[str]:
        """Get set of all supported media file extensions (images + videos)."""
        return cls.IMAGE_EXTENSIONS | cls.VIDEO_EXTENSIONS

    @classmethod
    def is_image_file(cls, file_path: Path) -> bool:
        return Path(file_path).suffix.lower() in cls.IMAGE_EXTENSIONS

    @classmethod
    def is_video_file(cls, file_path: Path) -> bool:
        return Path(file_path).suffix.lower() in cls.VIDEO_EXTENSIONS

    @classmethod
    def is_media_file(cls, file_path: Path) -> bool:
        """Check if file is a supported media format (image or video)."""
        return cls.is_image_file(file_path) or cls.is_video_file(file_path)

    @staticmethod
    def is_hidden(file_path: Path) -> bool:
        """Dot files (``.DS_Store``, ``._IMG_0001.JPG``) are hidden."""
        return Path(file_path).name.startswith(".")

    @classmethod
    def classify_file(cls, file_path: Path) -> str:
        """
        Classify file into type: 'image', 'video', or 'other'.

        Args:
            file_path: Path to the file to classify

        Returns:
            str: 'image', 'video', or 'other'
        """
        if cls.is_image_file(file_path):
            return "image"
        if cls.is_video_file(file_path):
            return "video"
        return "other"
