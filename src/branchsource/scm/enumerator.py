from __future__ import annotations

from contextlib import aclosing
import logging
import time
from typing import Collection, Optional, TYPE_CHECKING

from branchsource.metric import (
    fetch_counter,
    heads_discovered_counter,
    heads_rejected_counter,
    merge_hash_failure_counter,
)
from branchsource.scm.collector import CollectorState, HeadCollector, HeadObserver
from branchsource.scm.connector import PullRequestListing, RepositoryConnector
from branchsource.scm.errors import (
    CollectorStateError,
    ConnectorError,
    CriterionError,
    MergeHashUnavailable,
)
from branchsource.scm.probe import Criterion, Probe
from branchsource.scm.resolver import Candidate, RevisionResolver
from branchsource.scm.trust import classify_origin
from branchsource.scm.types import (
    BranchHead,
    Origin,
    PullRequestHead,
    RepositoryRef,
    pull_request_head_name,
)

if TYPE_CHECKING:
    from branchsource.model import BuildPolicy

logger = logging.getLogger("branchsource")


def _kind(candidate: Candidate) -> str:
    return "branch" if isinstance(candidate.head, BranchHead) else "pull_request"


class CandidateEnumerator:
    """Walks branches and pull requests of one repository.

    Candidates are checked against the criterion, resolved and streamed to the
    observer one at a time. The observer is asked whether to go on before every
    request to the connector, so a cancelling observer stops the scan before
    further pages, probes or merge commits are fetched.
    """

    def __init__(
        self,
        *,
        connector: RepositoryConnector,
        repo: RepositoryRef,
        policy: BuildPolicy,
        criterion: Criterion,
        observer: HeadObserver,
        heads: Optional[Collection[str]] = None,
    ):
        self.connector = connector
        self.repo = repo
        self.policy = policy
        self.criterion = criterion
        self.observer = observer
        self.heads = None if heads is None else set(heads)
        self.resolver = RevisionResolver(connector, repo)

    async def run(self) -> bool:
        """Returns ``False`` if the observer stopped the scan early."""
        if not await self.scan_branches():
            return False
        return await self.scan_pull_requests()

    async def scan_branches(self) -> bool:
        if not self.observer.should_continue():
            return False
        async with aclosing(self.connector.list_branches(self.repo)) as branches:
            async for branch in branches:
                self.resolver.remember_branch(branch.name, branch.tip)
                candidate = Candidate(head=BranchHead(branch.name), tip=branch.tip)
                if not await self.consider(candidate):
                    return False
        return True

    async def scan_pull_requests(self) -> bool:
        if not any(self.policy.strategies(origin) for origin in Origin):
            logger.debug("No pull request strategy enabled, skipping pull requests")
            return True
        if not self.observer.should_continue():
            return False
        async with aclosing(self.connector.list_pull_requests(self.repo)) as prs:
            async for pr in prs:
                for candidate in self.pull_request_candidates(pr):
                    if not await self.consider(candidate):
                        return False
        return True

    def pull_request_candidates(self, pr: PullRequestListing) -> list[Candidate]:
        origin = classify_origin(self.repo.owner, pr.source_owner)
        strategies = self.policy.strategies(origin)
        if not strategies:
            logger.debug(
                "Skipping %s#%d, no strategy enabled for %s pull requests",
                self.repo,
                pr.number,
                origin.value,
            )
        candidates = []
        for strategy in strategies:
            head = PullRequestHead(
                number=pr.number,
                checkout_strategy=strategy,
                name=pull_request_head_name(
                    pr.number, strategy, both=len(strategies) > 1
                ),
                source_owner=pr.source_owner,
                source_repo=pr.source_repo,
                source_branch=pr.source_branch,
                target=BranchHead(pr.target_branch),
                origin=origin,
            )
            candidates.append(Candidate(head=head, tip=pr.source_tip))
        return candidates

    async def consider(self, candidate: Candidate) -> bool:
        head = candidate.head
        if self.heads is not None and head.name not in self.heads:
            return True

        if not self.observer.should_continue():
            return False

        probe = Probe(self.connector, self.repo, candidate.tip)
        try:
            accepted = await self.criterion(probe)
        except ConnectorError:
            raise
        except Exception as e:
            raise CriterionError(
                f"Criterion failed for {head.name} at {candidate.tip}: {e}",
                head_name=head.name,
            ) from e

        if not accepted:
            logger.debug("Rejected %s at %s", head.name, candidate.tip)
            heads_rejected_counter.labels(kind=_kind(candidate)).inc()
            return True

        if not self.observer.should_continue():
            return False

        try:
            revision = await self.resolver.resolve(
                candidate, self.observer.should_continue
            )
        except MergeHashUnavailable as e:
            logger.warning("Dropping %s: %s", head.name, e)
            merge_hash_failure_counter.inc()
            return True
        if revision is None:
            return False

        logger.debug("Found %s -> %s", head.name, revision)
        heads_discovered_counter.labels(kind=_kind(candidate)).inc()
        self.observer.observe(head, revision)
        return self.observer.should_continue()


async def fetch(
    repo: RepositoryRef,
    criterion: Criterion,
    collector: HeadObserver,
    policy: BuildPolicy,
    connector: RepositoryConnector,
    heads: Optional[Collection[str]] = None,
) -> None:
    """Discover the heads of ``repo`` accepted by ``criterion``.

    Results are delivered to ``collector``. A :class:`HeadCollector` is marked
    complete when the scan ran to the end; errors propagate and leave it
    collecting.
    """
    if (
        isinstance(collector, HeadCollector)
        and collector.state != CollectorState.COLLECTING
    ):
        raise CollectorStateError(
            f"Cannot fetch into a collector in state {collector.state.name}"
        )

    started = time.monotonic()
    logger.info("Begin fetching heads of %s", repo)
    enumerator = CandidateEnumerator(
        connector=connector,
        repo=repo,
        policy=policy,
        criterion=criterion,
        observer=collector,
        heads=heads,
    )
    try:
        finished = await enumerator.run()
    except Exception as e:
        fetch_counter.labels(result="error").inc()
        logger.error("Fetching heads of %s failed: %s", repo, e)
        raise

    if finished:
        fetch_counter.labels(result="complete").inc()
        if isinstance(collector, HeadCollector):
            collector.complete()
    else:
        fetch_counter.labels(result="cancelled").inc()
        logger.info("Fetch of %s stopped by observer", repo)

    logger.info(
        "Finished fetching heads of %s in %.1f ms",
        repo,
        (time.monotonic() - started) * 1000.0,
    )
