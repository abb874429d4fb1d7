from branchsource.model import BuildPolicy, InvalidPolicy, load_policy, parse_policy
from branchsource.scm import (
    FirstMatchCollector,
    HeadCollector,
    RepositoryRef,
    TrustVerdict,
    evaluate_trust,
    fetch,
    trusted_revision,
)

__all__ = [
    "BuildPolicy",
    "FirstMatchCollector",
    "HeadCollector",
    "InvalidPolicy",
    "RepositoryRef",
    "TrustVerdict",
    "evaluate_trust",
    "fetch",
    "load_policy",
    "parse_policy",
    "trusted_revision",
]
