import pytest

from podium.capture import MediaCapture
from podium.errors import (
    DeviceError,
    InvalidUploadError,
    NoDataCapturedError,
    PermissionDeniedError,
    UnsupportedDeviceError,
)

from conftest import FakeCaptureProvider


def test_mime_type_falls_back_through_preferences(registry):
    provider = FakeCaptureProvider(supported=("video/webm",))
    capture = MediaCapture(provider, registry)

    assert capture.choose_mime_type() == "video/webm"
    assert provider.type_queries[:3] == [
        "video/webm;codecs=vp9,opus",
        "video/webm;codecs=vp8,opus",
        "video/webm",
    ]


def test_mp4_only_platform(registry):
    capture = MediaCapture(FakeCaptureProvider(supported=("video/mp4",)), registry)
    assert capture.choose_mime_type() == "video/mp4"


def test_no_supported_format(registry):
    capture = MediaCapture(FakeCaptureProvider(supported=()), registry)
    with pytest.raises(UnsupportedDeviceError):
        capture.choose_mime_type()


async def test_missing_provider_is_unsupported(registry):
    capture = MediaCapture(None, registry)
    with pytest.raises(UnsupportedDeviceError):
        await capture.request_device()


async def test_permission_denied_propagates(registry):
    capture = MediaCapture(FakeCaptureProvider(deny=True), registry)
    with pytest.raises(PermissionDeniedError):
        await capture.request_device()


async def test_unexpected_acquire_failure_becomes_device_error(registry):
    provider = FakeCaptureProvider()

    async def broken_acquire():
        raise RuntimeError("camera busy")
    provider.acquire = broken_acquire

    capture = MediaCapture(provider, registry)
    with pytest.raises(DeviceError, match="camera busy"):
        await capture.request_device()


async def test_recording_collects_all_slices_including_final(capture, provider):
    device = await capture.request_device()
    session = await capture.start_recording(device)
    assert session.is_recording
    assert provider.started_with == ("video/webm", 1000)

    artifact = await capture.stop_recording(session)

    assert artifact.payload == b"slice-1slice-2slice-final"
    assert artifact.mime_type == "video/webm"
    assert artifact.source == "recording"
    assert artifact.filename == "response.webm"
    assert artifact.preview_uri is not None
    assert provider.release_calls == 1
    assert device.released


async def test_final_slice_kept_when_stop_is_never_acknowledged(registry):
    provider = FakeCaptureProvider(ack_stop=False)
    capture = MediaCapture(provider, registry, final_slice_timeout=0.05)
    session = await capture.start_recording(await capture.request_device())

    artifact = await capture.stop_recording(session)

    assert artifact.payload.endswith(b"slice-final")
    assert provider.release_calls == 1


async def test_empty_recording_raises_and_releases_device(registry):
    provider = FakeCaptureProvider(chunks=(b"",), final_chunk=None)
    capture = MediaCapture(provider, registry, final_slice_timeout=0.05)
    session = await capture.start_recording(await capture.request_device())

    with pytest.raises(NoDataCapturedError):
        await capture.stop_recording(session)

    assert provider.release_calls == 1
    assert registry.active_count == 0


async def test_abandon_releases_device_once_and_ignores_late_slices(capture, provider):
    device = await capture.request_device()
    session = await capture.start_recording(device)

    await capture.abandon(session)
    await capture.abandon(session)
    device.release()

    assert provider.stop_calls == 1
    assert provider.release_calls == 1
    assert session.chunks == []


async def test_start_failure_releases_device(registry):
    provider = FakeCaptureProvider()

    async def broken_start(*args):
        raise DeviceError("recorder failed to start")
    provider.start = broken_start

    capture = MediaCapture(provider, registry)
    device = await capture.request_device()
    with pytest.raises(DeviceError):
        await capture.start_recording(device)
    assert provider.release_calls == 1


def test_artifact_from_file(tmp_path, capture):
    video = tmp_path / "answer.mp4"
    video.write_bytes(b"\x00\x00\x00\x18ftypmp42")

    artifact = capture.artifact_from_file(str(video))

    assert artifact.mime_type == "video/mp4"
    assert artifact.filename == "answer.mp4"
    assert artifact.source == "upload"
    assert artifact.size == 12


def test_missing_file_is_invalid_upload(tmp_path, capture):
    with pytest.raises(InvalidUploadError, match="not found"):
        capture.artifact_from_file(str(tmp_path / "nope.webm"))


def test_non_video_file_is_invalid_upload(tmp_path, capture):
    notes = tmp_path / "notes.txt"
    notes.write_text("not a video")
    with pytest.raises(InvalidUploadError):
        capture.artifact_from_file(str(notes))


def test_empty_file_is_invalid_upload(tmp_path, capture):
    empty = tmp_path / "empty.webm"
    empty.write_bytes(b"")
    with pytest.raises(InvalidUploadError, match="empty"):
        capture.artifact_from_file(str(empty))


async def test_unsupported_format_releases_device(registry):
    provider = FakeCaptureProvider(supported=())
    capture = MediaCapture(provider, registry)
    device = await capture.request_device()

    with pytest.raises(UnsupportedDeviceError):
        await capture.start_recording(device)

    assert device.released
    assert provider.release_calls == 1
