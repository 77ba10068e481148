"""Video file utilities."""

import os
import logging
import mimetypes
from typing import Optional

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "video/webm": ".webm",
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "video/x-matroska": ".mkv",
    "video/ogg": ".ogv",
}


def base_mime_type(mime_type: str) -> str:
    """Strip codec parameters: ``video/webm;codecs=vp9`` -> ``video/webm``."""
    return (mime_type or "").split(";", 1)[0].strip().lower()


def extension_for_mime_type(mime_type: str) -> str:
    return _EXTENSIONS.get(base_mime_type(mime_type), ".bin")


def guess_video_mime_type(path: str) -> Optional[str]:
    """Guess a video MIME type from the file name, or None if it is not a video."""
    ext = os.path.splitext(path)[1].lower()
    for mime, known_ext in _EXTENSIONS.items():
        if ext == known_ext:
            return mime
    guessed, _ = mimetypes.guess_type(path)
    if guessed and guessed.startswith("video/"):
        return guessed
    return None


def load_video_from_path(video_path: str) -> bytes:
    """Load a video file from disk."""
    if not os.path.exists(video_path):
        raise FileNotFoundError(f"Video file not found: {video_path}")

    with open(video_path, "rb") as f:
        video_data = f.read()

    logger.info(f"Loaded video from path: {video_path}, size: {len(video_data)} bytes")
    return video_data


def validate_video(video_data: bytes, video_path: str = "unknown") -> dict:
    """Basic checks on an uploaded video before it becomes an answer."""
    if not video_data:
        return {"valid": False, "error": "Video file is empty", "file_path": video_path}

    mime_type = guess_video_mime_type(video_path)
    if mime_type is None:
        return {"valid": False, "error": "File does not look like a video", "file_path": video_path}

    return {
        "valid": True,
        "mime_type": mime_type,
        "file_size": len(video_data),
        "file_path": video_path,
    }
