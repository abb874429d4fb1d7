from __future__ import annotations

from enum import Enum
import logging
from typing import Dict, Protocol

from branchsource.scm.errors import CollectorStateError
from branchsource.scm.types import Head, Revision

logger = logging.getLogger("branchsource")


class HeadObserver(Protocol):
    def observe(self, head: Head, revision: Revision) -> None:
        ...

    def should_continue(self) -> bool:
        ...


class CollectorState(Enum):
    COLLECTING = 1
    COMPLETE = 2
    CANCELLED = 3


class HeadCollector:
    """Accumulates discovered heads in insertion order.

    Observing a head equal to one already recorded replaces its revision in
    place. ``result()`` is only available once the fetch finished or the
    collector cancelled itself.
    """

    state: CollectorState

    def __init__(self):
        self.state = CollectorState.COLLECTING
        self._result: Dict[Head, Revision] = {}

    def observe(self, head: Head, revision: Revision) -> None:
        if self.state != CollectorState.COLLECTING:
            raise CollectorStateError(
                f"Cannot observe {head} on a collector in state {self.state.name}"
            )
        if head in self._result:
            logger.debug("Replacing revision of %s", head)
        self._result[head] = revision

    def should_continue(self) -> bool:
        return self.state == CollectorState.COLLECTING

    def cancel(self) -> None:
        if self.state == CollectorState.COLLECTING:
            self.state = CollectorState.CANCELLED

    def complete(self) -> None:
        if self.state == CollectorState.COLLECTING:
            self.state = CollectorState.COMPLETE

    def result(self) -> Dict[Head, Revision]:
        if self.state == CollectorState.COLLECTING:
            raise CollectorStateError("Collection has not finished yet")
        return dict(self._result)

    def __len__(self) -> int:
        return len(self._result)


class LimitCollector(HeadCollector):
    def __init__(self, limit: int):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        super().__init__()
        self.limit = limit

    def observe(self, head: Head, revision: Revision) -> None:
        super().observe(head, revision)
        if len(self) >= self.limit:
            self.cancel()


class FirstMatchCollector(LimitCollector):
    def __init__(self):
        super().__init__(limit=1)
