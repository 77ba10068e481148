"""Per-question store of answer artifacts."""

import logging
from typing import Dict, Optional

from ..errors import InvalidQuestionIndexError, SessionClosedError
from ..models import ResponseArtifact

logger = logging.getLogger(__name__)


class ResponseStore:
    """Holds at most one artifact per question index and owns preview lifetime.

    Every replacement or removal revokes the outgoing artifact's preview.
    ``clear_all`` closes the store for good and bumps ``epoch`` so callers
    still holding work from the old session can tell it is stale.
    """

    def __init__(self, question_count: int, epoch: int = 0):
        if question_count < 1:
            raise ValueError("A session needs at least one question")
        self.question_count = question_count
        self.epoch = epoch
        self.closed = False
        self._entries: Dict[int, ResponseArtifact] = {}

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.question_count:
            raise InvalidQuestionIndexError(
                f"Question index {index} out of range 0..{self.question_count - 1}"
            )

    def _check_open(self) -> None:
        if self.closed:
            raise SessionClosedError("Response store has been cleared")

    def set(self, index: int, artifact: ResponseArtifact) -> None:
        self._check_open()
        self._check_index(index)
        previous = self._entries.get(index)
        self._entries[index] = artifact
        # The new artifact is already in place, so the old preview goes last.
        if previous is not None and previous is not artifact:
            previous.release_preview()
        logger.debug(f"Stored {artifact.source} artifact for question {index} ({artifact.size} bytes)")

    def get(self, index: int) -> Optional[ResponseArtifact]:
        return self._entries.get(index)

    def clear(self, index: int) -> None:
        self._check_open()
        self._check_index(index)
        previous = self._entries.pop(index, None)
        if previous is not None:
            previous.release_preview()
            logger.debug(f"Cleared artifact for question {index}")

    def clear_all(self) -> None:
        """Revoke every preview and close the store."""
        if self.closed:
            return
        entries, self._entries = self._entries, {}
        for artifact in entries.values():
            artifact.release_preview()
        self.closed = True
        self.epoch += 1
        logger.info(f"Response store cleared ({len(entries)} artifacts released)")

    @property
    def highest_answered_index(self) -> int:
        return max(self._entries, default=-1)

    def answered_indices(self):
        return tuple(sorted(self._entries))

    def snapshot(self) -> Dict[int, ResponseArtifact]:
        return dict(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, index: int) -> bool:
        return index in self._entries
