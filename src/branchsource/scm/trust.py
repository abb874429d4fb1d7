from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from branchsource.scm.types import (
    BranchRevision,
    Origin,
    PullRequestRevision,
    RepositoryRef,
    Revision,
    TrustVerdict,
)

if TYPE_CHECKING:
    from branchsource.model import BuildPolicy


def classify_origin(repo_owner: str, source_owner: str) -> Origin:
    # account names on the hosting service are case-insensitive
    if repo_owner.casefold() == source_owner.casefold():
        return Origin.ORIGIN
    return Origin.FORK


def evaluate_trust(
    repo: RepositoryRef, revision: Revision, policy: BuildPolicy
) -> TrustVerdict:
    """Decide whether ``revision`` may be built with full privileges.

    Branch revisions of the repository itself are always trusted. For pull
    requests the origin is derived again from the owners instead of reading
    ``head.origin``, and the matching flag of ``policy`` decides.
    """
    if isinstance(revision, BranchRevision):
        return TrustVerdict.TRUSTED
    if isinstance(revision, PullRequestRevision):
        head = revision.head
        origin = classify_origin(repo.owner, head.source_owner)
        if policy.builds(origin, head.checkout_strategy):
            return TrustVerdict.TRUSTED
        return TrustVerdict.UNTRUSTED
    raise TypeError(f"Unknown revision type {type(revision).__name__}")


def trusted_revision(
    repo: RepositoryRef, revision: Revision, policy: BuildPolicy
) -> Optional[Revision]:
    if evaluate_trust(repo, revision, policy) == TrustVerdict.TRUSTED:
        return revision
    return None
