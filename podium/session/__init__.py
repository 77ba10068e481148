"""Session package initialization."""

from .response_store import ResponseStore
from .navigator import SessionNavigator
from .controller import InterviewSessionController

__all__ = [
    "ResponseStore",
    "SessionNavigator",
    "InterviewSessionController"
]
