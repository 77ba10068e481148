"""Question navigation with progressive unlocking."""

import logging

from ..errors import InvalidQuestionIndexError, NavigationLockedError
from .response_store import ResponseStore

logger = logging.getLogger(__name__)


class SessionNavigator:
    """Tracks the active question and the furthest question the user may open.

    The frontier is one past the highest answered question, capped at the
    last question. It is cached and only moves when ``recompute_unlock`` runs.
    """

    def __init__(self, store: ResponseStore):
        self.store = store
        self.question_count = store.question_count
        self.current_index = 0
        self.max_unlocked_index = 0
        self.recompute_unlock()

    @property
    def last_index(self) -> int:
        return self.question_count - 1

    @property
    def highest_answered_index(self) -> int:
        return self.store.highest_answered_index

    @property
    def is_terminal(self) -> bool:
        """Last question answered: the session can be completed."""
        return self.store.get(self.last_index) is not None

    def recompute_unlock(self) -> int:
        self.max_unlocked_index = min(self.highest_answered_index + 1, self.last_index)
        # Clearing answers can pull the frontier behind the current question.
        if self.current_index > self.max_unlocked_index:
            logger.info(
                f"Question {self.current_index} relocked, moving back to {self.max_unlocked_index}"
            )
            self.current_index = self.max_unlocked_index
        return self.max_unlocked_index

    def go_to(self, index: int) -> int:
        if not 0 <= index <= self.last_index:
            raise InvalidQuestionIndexError(
                f"Question index {index} out of range 0..{self.last_index}"
            )
        if index > self.max_unlocked_index:
            raise NavigationLockedError(index, self.max_unlocked_index)
        self.current_index = index
        return self.current_index

    def next(self) -> bool:
        if self.current_index < min(self.max_unlocked_index, self.last_index):
            self.current_index += 1
            return True
        return False

    def previous(self) -> bool:
        if self.current_index > 0:
            self.current_index -= 1
            return True
        return False
