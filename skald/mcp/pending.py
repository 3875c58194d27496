import logging
from collections import OrderedDict
from typing import Any, Optional

logger = logging.getLogger("Skald.mcp.pending")

DEFAULT_CAPACITY = 100
DEFAULT_ID_PREFIX = "s"


class PendingRequestTracker:
    """
    Bounded id -> purpose map for requests the server sends to the client.

    Ids are prefixed strings ("s1", "s2", ...) so they never collide with the
    ids a client picks for its own requests. Once ``capacity`` entries are
    outstanding, the oldest one is dropped to make room.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, id_prefix: str = DEFAULT_ID_PREFIX):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.id_prefix = id_prefix
        self._counter = 0
        self._pending: "OrderedDict[str, str]" = OrderedDict()

    def send(self, purpose: str) -> str:
        self._counter += 1
        request_id = f"{self.id_prefix}{self._counter}"
        while len(self._pending) >= self.capacity:
            evicted_id, evicted_purpose = self._pending.popitem(last=False)
            logger.warning(
                "Pending request table full (%d); dropping %s (%s)",
                self.capacity,
                evicted_id,
                evicted_purpose,
            )
        self._pending[request_id] = purpose
        return request_id

    def resolve(self, request_id: Any) -> Optional[str]:
        if not isinstance(request_id, str):
            request_id = str(request_id)
        purpose = self._pending.pop(request_id, None)
        if purpose is None:
            logger.warning("Dropping response for unknown request id %r", request_id)
        return purpose

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._pending

    def __len__(self) -> int:
        return len(self._pending)
