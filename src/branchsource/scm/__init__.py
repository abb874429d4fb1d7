from branchsource.scm.types import (
    BranchHead,
    BranchRevision,
    CheckoutStrategy,
    FileType,
    Head,
    Origin,
    PullRequestHead,
    PullRequestRevision,
    RepositoryRef,
    Revision,
    TrustVerdict,
)
from branchsource.scm.errors import (
    CollectorStateError,
    ConnectorError,
    CriterionError,
    MergeHashUnavailable,
    ScanError,
)
from branchsource.scm.connector import (
    BranchListing,
    PullRequestListing,
    RepositoryConnector,
    RepositoryMetadata,
)
from branchsource.scm.probe import Criterion, Probe, all_of, always, any_of, file_exists
from branchsource.scm.collector import (
    CollectorState,
    FirstMatchCollector,
    HeadCollector,
    HeadObserver,
    LimitCollector,
)
from branchsource.scm.trust import classify_origin, evaluate_trust, trusted_revision
from branchsource.scm.resolver import Candidate, RevisionResolver
from branchsource.scm.enumerator import CandidateEnumerator, fetch

__all__ = [
    "BranchHead",
    "BranchListing",
    "BranchRevision",
    "Candidate",
    "CandidateEnumerator",
    "CheckoutStrategy",
    "CollectorState",
    "CollectorStateError",
    "ConnectorError",
    "Criterion",
    "CriterionError",
    "FileType",
    "FirstMatchCollector",
    "Head",
    "HeadCollector",
    "HeadObserver",
    "LimitCollector",
    "MergeHashUnavailable",
    "Origin",
    "Probe",
    "PullRequestHead",
    "PullRequestListing",
    "PullRequestRevision",
    "RepositoryConnector",
    "RepositoryMetadata",
    "RepositoryRef",
    "Revision",
    "RevisionResolver",
    "ScanError",
    "TrustVerdict",
    "all_of",
    "always",
    "any_of",
    "classify_origin",
    "evaluate_trust",
    "fetch",
    "file_exists",
    "trusted_revision",
]
