"""Exception hierarchy for the interview session core."""


class PodiumError(Exception):
    """Base class for all interview session errors."""


# Device errors

class DeviceError(PodiumError):
    """Camera or microphone could not be used."""


class PermissionDeniedError(DeviceError):
    """The user (or the OS) refused access to the capture device."""


class UnsupportedDeviceError(DeviceError):
    """Capture is not available, or no preferred video format is supported."""


# Capture errors

class NoDataCapturedError(PodiumError):
    """A recording finished without producing any bytes."""


class InvalidUploadError(PodiumError):
    """A selected file cannot be used as a video answer."""


# Navigation errors

class InvalidQuestionIndexError(PodiumError, IndexError):
    """Index outside the question range."""


class NavigationLockedError(PodiumError):
    """Index is beyond the current unlock frontier."""

    def __init__(self, index: int, max_unlocked_index: int):
        super().__init__(
            f"Question {index} is locked (furthest unlocked question is {max_unlocked_index})"
        )
        self.index = index
        self.max_unlocked_index = max_unlocked_index


# Session lifecycle errors

class SessionNotActiveError(PodiumError):
    """An operation needs a running session but none is active."""


class SessionClosedError(PodiumError):
    """The session was torn down while the operation was in progress."""


class CompletionNotAvailableError(PodiumError):
    """The last question has not been answered yet."""


# Service errors

class ServiceError(PodiumError):
    """A collaborator service failed."""


class QuestionGenerationError(ServiceError):
    """The question service returned no usable questions."""


class ReviewServiceError(ServiceError):
    """The review service could not be reached or returned an error body."""


class ReviewParseError(ServiceError):
    """The review service answered with a body that could not be understood."""
