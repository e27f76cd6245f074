"""
Record identity generation.

Every created record receives a fresh string id from an injected
``IdFactory``.  The default factory draws uuid4 values, so several records
created inside one call at the same instant never collide.
"""

from collections.abc import Callable
from itertools import count
from uuid import uuid4

IdFactory = Callable[[], str]


def uuid_ids() -> str:
    """Default id factory: a random uuid4 rendered as a string."""
    return str(uuid4())


class SequentialIds:
    """
    Deterministic id factory for tests and replays.

    Yields ``"<prefix>-1"``, ``"<prefix>-2"``, ... in call order.
    """

    def __init__(self, prefix: str = "id"):
        self._prefix = prefix
        self._counter = count(1)

    def __call__(self) -> str:
        return f"{self._prefix}-{next(self._counter)}"
