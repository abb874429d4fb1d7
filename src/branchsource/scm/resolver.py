from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Dict, Optional

from branchsource.scm.connector import RepositoryConnector
from branchsource.scm.errors import ConnectorError, MergeHashUnavailable
from branchsource.scm.types import (
    BranchHead,
    BranchRevision,
    CheckoutStrategy,
    Head,
    PullRequestHead,
    PullRequestRevision,
    RepositoryRef,
    Revision,
)

logger = logging.getLogger("branchsource")


@dataclass(frozen=True)
class Candidate:
    head: Head
    # tip the criterion is evaluated against, the source tip for pull requests
    tip: str


class RevisionResolver:
    """Attaches revisions to accepted heads.

    Branch tips seen while listing are remembered so that pull request base
    hashes normally need no extra request.
    """

    def __init__(self, connector: RepositoryConnector, repo: RepositoryRef):
        self.connector = connector
        self.repo = repo
        self.branch_tips: Dict[str, str] = {}

    def remember_branch(self, name: str, tip: str) -> None:
        self.branch_tips[name] = tip

    async def target_tip(self, target: BranchHead) -> str:
        if tip := self.branch_tips.get(target.name):
            return tip
        logger.debug("Target branch %s not listed, fetching", target.name)
        branch = await self.connector.get_branch(self.repo, target.name)
        self.branch_tips[branch.name] = branch.tip
        return branch.tip

    async def merge_hash(self, head: PullRequestHead) -> str:
        try:
            merge_hash: Optional[str] = await self.connector.merge_hash(
                self.repo, head.number
            )
        except MergeHashUnavailable:
            raise
        except ConnectorError as e:
            raise MergeHashUnavailable(
                f"Fetching merge commit of {self.repo}#{head.number} failed: {e}",
                number=head.number,
                status_code=e.status_code,
            ) from e
        if not merge_hash:
            raise MergeHashUnavailable(
                f"No merge commit available for {self.repo}#{head.number}",
                number=head.number,
            )
        return merge_hash

    async def resolve(
        self,
        candidate: Candidate,
        should_continue: Callable[[], bool] = lambda: True,
    ) -> Optional[Revision]:
        """Returns ``None`` if ``should_continue`` turned false between requests."""
        head = candidate.head
        if isinstance(head, BranchHead):
            return BranchRevision(head=head, hash=candidate.tip)
        if isinstance(head, PullRequestHead):
            base_hash = await self.target_tip(head.target)
            merge_hash = None
            if head.checkout_strategy == CheckoutStrategy.MERGE:
                if not should_continue():
                    return None
                merge_hash = await self.merge_hash(head)
            return PullRequestRevision(
                head=head,
                base_hash=base_hash,
                pull_hash=candidate.tip,
                merge_hash=merge_hash,
            )
        raise TypeError(f"Unknown head type {type(head).__name__}")
