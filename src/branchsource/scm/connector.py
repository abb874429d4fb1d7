from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator, Optional, Protocol

from branchsource.scm.types import FileType, RepositoryRef


@dataclass(frozen=True)
class BranchListing:
    name: str
    tip: str


@dataclass(frozen=True)
class PullRequestListing:
    number: int
    source_owner: str
    source_repo: str
    source_branch: str
    source_tip: str
    target_branch: str


@dataclass(frozen=True)
class RepositoryMetadata:
    default_branch: str
    html_url: Optional[str] = None
    description: Optional[str] = None
    homepage: Optional[str] = None


class RepositoryConnector(Protocol):
    """Remote operations the scan needs from a hosting service.

    Every method is a suspension point. Implementations raise
    :class:`~branchsource.scm.errors.ConnectorError` on transport failures.
    """

    def list_branches(self, repo: RepositoryRef) -> AsyncIterator[BranchListing]:
        ...

    def list_pull_requests(
        self, repo: RepositoryRef
    ) -> AsyncIterator[PullRequestListing]:
        ...

    async def get_branch(self, repo: RepositoryRef, name: str) -> BranchListing:
        ...

    async def merge_hash(self, repo: RepositoryRef, number: int) -> Optional[str]:
        ...

    async def default_branch(self, repo: RepositoryRef) -> str:
        ...

    async def repository_metadata(self, repo: RepositoryRef) -> RepositoryMetadata:
        ...

    async def stat(self, repo: RepositoryRef, revision: str, path: str) -> FileType:
        ...
