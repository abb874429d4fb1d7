from __future__ import annotations

from typing import Awaitable, Callable

from branchsource.scm.connector import RepositoryConnector
from branchsource.scm.types import FileType, RepositoryRef


class Probe:
    """File lookups against a single revision of a repository."""

    connector: RepositoryConnector
    repo: RepositoryRef
    revision: str
    call_count: int

    def __init__(
        self, connector: RepositoryConnector, repo: RepositoryRef, revision: str
    ):
        self.connector = connector
        self.repo = repo
        self.revision = revision
        self.call_count = 0

    async def stat(self, path: str) -> FileType:
        self.call_count += 1
        return await self.connector.stat(self.repo, self.revision, path.lstrip("/"))

    async def exists(self, path: str) -> bool:
        return await self.stat(path) != FileType.ABSENT

    def __repr__(self) -> str:
        return f"Probe({self.repo}@{self.revision})"


Criterion = Callable[[Probe], Awaitable[bool]]


async def always(probe: Probe) -> bool:
    return True


def file_exists(path: str, file_type: FileType = FileType.REGULAR_FILE) -> Criterion:
    async def criterion(probe: Probe) -> bool:
        return await probe.stat(path) == file_type

    criterion.__name__ = f"file_exists({path!r})"
    return criterion


def all_of(*criteria: Criterion) -> Criterion:
    async def criterion(probe: Probe) -> bool:
        for c in criteria:
            if not await c(probe):
                return False
        return True

    return criterion


def any_of(*criteria: Criterion) -> Criterion:
    async def criterion(probe: Probe) -> bool:
        for c in criteria:
            if await c(probe):
                return True
        return False

    return criterion
