"""Capture package initialization."""

from .media_capture import (
    MediaCaptureProvider,
    DeviceHandle,
    CaptureSession,
    MediaCapture
)

__all__ = [
    "MediaCaptureProvider",
    "DeviceHandle",
    "CaptureSession",
    "MediaCapture"
]
