"""Camera capture and upload handling that turn an answer into a ResponseArtifact."""

import abc
import asyncio
import logging
import os
from typing import Any, Callable, List, Optional, Sequence

from ..config import Config
from ..errors import (
    DeviceError,
    InvalidUploadError,
    NoDataCapturedError,
    UnsupportedDeviceError,
)
from ..models import ResponseArtifact
from ..utils import (
    PreviewRegistry,
    extension_for_mime_type,
    load_video_from_path,
    validate_video,
)

logger = logging.getLogger(__name__)


class MediaCaptureProvider(abc.ABC):
    """Platform capture backend.

    Implementations wrap whatever the target offers (a native camera API, a
    bridge process, a scripted fake in tests). Recording is event driven: the
    provider calls ``on_data`` for every time slice and ``on_stop`` once the
    last slice has been delivered after a stop request.
    """

    @abc.abstractmethod
    async def acquire(self) -> Any:
        """Open camera and microphone. Raises PermissionDeniedError or UnsupportedDeviceError."""

    @abc.abstractmethod
    def is_type_supported(self, mime_type: str) -> bool:
        """Whether the recorder can produce ``mime_type``."""

    @abc.abstractmethod
    async def start(
        self,
        stream: Any,
        mime_type: str,
        timeslice_ms: int,
        on_data: Callable[[bytes], None],
        on_stop: Callable[[], None],
    ) -> Any:
        """Begin recording ``stream`` in the background and return a recorder object."""

    @abc.abstractmethod
    async def stop(self, recorder: Any) -> None:
        """Ask the recorder to stop. The final slice may arrive after this returns."""

    @abc.abstractmethod
    def release(self, stream: Any) -> None:
        """Stop every hardware track of ``stream``."""


class DeviceHandle:
    """A granted camera/microphone stream."""

    def __init__(self, provider: MediaCaptureProvider, stream: Any):
        self._provider = provider
        self.stream = stream
        self.released = False

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        self._provider.release(self.stream)
        logger.info("Capture device released")


class CaptureSession:
    """One recording attempt: the live device plus the slices received so far."""

    def __init__(self, device: DeviceHandle, mime_type: str):
        self.device = device
        self.mime_type = mime_type
        self.recorder: Any = None
        self.chunks: List[bytes] = []
        self.closed = False
        self._stopped = asyncio.Event()

    @property
    def is_recording(self) -> bool:
        return not self.closed and not self._stopped.is_set()

    @property
    def bytes_captured(self) -> int:
        return sum(len(chunk) for chunk in self.chunks)

    def _on_data(self, chunk: bytes) -> None:
        if self.closed or not chunk:
            return
        self.chunks.append(bytes(chunk))

    def _on_stop(self) -> None:
        self._stopped.set()

    def close(self) -> None:
        """Release the device and drop buffered slices."""
        if self.closed:
            return
        self.closed = True
        self.chunks = []
        self.device.release()


class MediaCapture:
    """Produces response artifacts from live recordings or uploaded files."""

    def __init__(
        self,
        provider: Optional[MediaCaptureProvider],
        previews: PreviewRegistry,
        mime_preferences: Optional[Sequence[str]] = None,
        timeslice_ms: Optional[int] = None,
        final_slice_timeout: Optional[float] = None,
    ):
        self.provider = provider
        self.previews = previews
        self.mime_preferences = tuple(mime_preferences or Config.VIDEO_MIME_PREFERENCES)
        self.timeslice_ms = timeslice_ms or Config.RECORDING_TIMESLICE_MS
        self.final_slice_timeout = (
            final_slice_timeout if final_slice_timeout is not None else Config.FINAL_SLICE_TIMEOUT
        )

    def choose_mime_type(self) -> str:
        """First preferred format the provider supports."""
        if self.provider is None:
            raise UnsupportedDeviceError("Media capture is not supported on this platform")
        for mime_type in self.mime_preferences:
            if self.provider.is_type_supported(mime_type):
                return mime_type
        raise UnsupportedDeviceError(
            f"None of the preferred video formats are supported: {', '.join(self.mime_preferences)}"
        )

    async def request_device(self) -> DeviceHandle:
        if self.provider is None:
            raise UnsupportedDeviceError("Media capture is not supported on this platform")
        try:
            stream = await self.provider.acquire()
        except DeviceError:
            raise
        except Exception as e:
            logger.error(f"Error accessing camera and microphone: {e}")
            raise DeviceError(f"Could not access camera and microphone: {e}") from e

        logger.info("Camera and microphone access granted")
        return DeviceHandle(self.provider, stream)

    async def start_recording(self, device: DeviceHandle) -> CaptureSession:
        if device.released:
            raise DeviceError("Capture device has already been released")

        try:
            mime_type = self.choose_mime_type()
        except UnsupportedDeviceError:
            device.release()
            raise

        session = CaptureSession(device, mime_type)
        try:
            session.recorder = await self.provider.start(
                device.stream,
                session.mime_type,
                self.timeslice_ms,
                session._on_data,
                session._on_stop,
            )
        except Exception:
            session.close()
            raise

        logger.info(f"Recording started ({session.mime_type}, {self.timeslice_ms} ms slices)")
        return session

    async def stop_recording(self, session: CaptureSession) -> ResponseArtifact:
        """Stop, wait for the final slice, and assemble the artifact.

        The device is released whatever the outcome.
        """
        if session.closed:
            raise NoDataCapturedError("Recording was already closed")

        try:
            await self.provider.stop(session.recorder)
            try:
                await asyncio.wait_for(session._stopped.wait(), timeout=self.final_slice_timeout)
            except asyncio.TimeoutError:
                logger.warning("Recorder did not acknowledge stop in time; using slices received so far")

            payload = b"".join(session.chunks)
            if not payload:
                raise NoDataCapturedError("Recording produced no data")

            artifact = self.artifact_from_bytes(payload, session.mime_type, source="recording")
        finally:
            session.close()

        logger.info(f"Recording stopped: {artifact.size} bytes")
        return artifact

    async def abandon(self, session: CaptureSession) -> None:
        """Drop a recording attempt without producing an artifact."""
        if session.closed:
            return
        try:
            if session.is_recording and session.recorder is not None:
                await self.provider.stop(session.recorder)
        except Exception as e:
            logger.warning(f"Error stopping recorder while abandoning capture: {e}")
        finally:
            session.close()
        logger.info("Recording abandoned")

    def artifact_from_bytes(
        self,
        payload: bytes,
        mime_type: str,
        source: str = "upload",
        filename: Optional[str] = None,
    ) -> ResponseArtifact:
        if not payload:
            raise NoDataCapturedError("Video payload is empty")
        return ResponseArtifact(
            payload=payload,
            mime_type=mime_type,
            preview=self.previews.create(payload),
            source=source,
            filename=filename or f"response{extension_for_mime_type(mime_type)}",
        )

    def artifact_from_file(self, video_path: str) -> ResponseArtifact:
        """Build an artifact from a user-selected file."""
        try:
            video_data = load_video_from_path(video_path)
        except OSError as e:
            raise InvalidUploadError(str(e)) from e

        validation = validate_video(video_data, video_path)
        if not validation.get("valid"):
            raise InvalidUploadError(validation.get("error", "Invalid video file"))

        return self.artifact_from_bytes(
            video_data,
            validation["mime_type"],
            source="upload",
            filename=os.path.basename(video_path),
        )
