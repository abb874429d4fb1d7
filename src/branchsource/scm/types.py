from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class Origin(Enum):
    ORIGIN = "origin"
    FORK = "fork"


class CheckoutStrategy(Enum):
    HEAD = "head"
    MERGE = "merge"


class TrustVerdict(Enum):
    TRUSTED = "trusted"
    UNTRUSTED = "untrusted"


class FileType(Enum):
    REGULAR_FILE = "file"
    DIRECTORY = "dir"
    ABSENT = "absent"
    OTHER = "other"


@dataclass(frozen=True)
class RepositoryRef:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, full_name: str) -> RepositoryRef:
        owner, sep, name = full_name.strip().partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"Expected OWNER/REPO, got {full_name!r}")
        return cls(owner=owner, name=name)

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class BranchHead:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class PullRequestHead:
    """A pull request checked out with one strategy.

    Identity is ``(number, checkout_strategy)``; the remaining fields describe
    the pull request and do not take part in equality.
    """

    number: int
    checkout_strategy: CheckoutStrategy
    name: str = field(compare=False)
    source_owner: str = field(compare=False)
    source_repo: str = field(compare=False)
    source_branch: str = field(compare=False)
    target: BranchHead = field(compare=False)
    origin: Origin = field(compare=False)

    def __str__(self) -> str:
        return self.name


Head = Union[BranchHead, PullRequestHead]


@dataclass(frozen=True)
class BranchRevision:
    head: BranchHead
    hash: str

    def __str__(self) -> str:
        return self.hash


@dataclass(frozen=True)
class PullRequestRevision:
    head: PullRequestHead
    base_hash: str
    pull_hash: str
    merge_hash: Optional[str] = None

    def __str__(self) -> str:
        if self.merge_hash is not None:
            return f"{self.pull_hash}+{self.base_hash} ({self.merge_hash})"
        return f"{self.pull_hash}+{self.base_hash}"


Revision = Union[BranchRevision, PullRequestRevision]


def pull_request_head_name(number: int, strategy: CheckoutStrategy, both: bool) -> str:
    if not both:
        return f"PR-{number}"
    return f"PR-{number}-{strategy.value}"
