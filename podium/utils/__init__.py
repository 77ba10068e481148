"""Utilities package initialization."""

from .preview_utils import PreviewRegistry

from .media_utils import (
    base_mime_type,
    extension_for_mime_type,
    guess_video_mime_type,
    load_video_from_path,
    validate_video
)

__all__ = [
    "PreviewRegistry",
    "base_mime_type",
    "extension_for_mime_type",
    "guess_video_mime_type",
    "load_video_from_path",
    "validate_video"
]
