"""Preview handle registry.

Plays the role of the browser's object-URL table: each handle maps an opaque
``preview:`` URI to an artifact payload until it is revoked.
"""

import logging
import uuid
from typing import Dict, Optional

from ..models import PreviewHandle

logger = logging.getLogger(__name__)


class PreviewRegistry:
    """Issues and revokes preview handles."""

    def __init__(self):
        self._entries: Dict[str, memoryview] = {}

    def create(self, payload: bytes) -> PreviewHandle:
        uri = f"preview:{uuid.uuid4()}"
        self._entries[uri] = memoryview(payload)
        return PreviewHandle(uri, self.revoke)

    def revoke(self, uri: str) -> None:
        """Drop a handle. Unknown or already revoked URIs are ignored."""
        if self._entries.pop(uri, None) is not None:
            logger.debug(f"Revoked preview {uri}")

    def resolve(self, uri: str) -> Optional[memoryview]:
        """Return a zero-copy view of the payload behind ``uri``, if still live."""
        return self._entries.get(uri)

    @property
    def active_count(self) -> int:
        return len(self._entries)
