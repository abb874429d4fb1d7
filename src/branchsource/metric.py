import re

from prometheus_client import Counter, CollectorRegistry

push_registry = CollectorRegistry()

api_call_count = Counter(
    "branchsource_num_api_calls",
    "Total number of GitHub API calls",
    labelnames=["endpoint"],
    registry=push_registry,
)

fetch_counter = Counter(
    "branchsource_num_fetch",
    "Number of head fetches by outcome",
    labelnames=["result"],
    registry=push_registry,
)

heads_discovered_counter = Counter(
    "branchsource_num_heads_discovered",
    "Number of heads reported to a collector",
    labelnames=["kind"],
    registry=push_registry,
)

heads_rejected_counter = Counter(
    "branchsource_num_heads_rejected",
    "Number of candidate heads rejected by the criterion",
    labelnames=["kind"],
    registry=push_registry,
)

merge_hash_failure_counter = Counter(
    "branchsource_num_merge_hash_failures",
    "Number of pull request heads dropped because no merge commit was available",
    registry=push_registry,
)

error_counter = Counter(
    "branchsource_error_counter",
    "Total number of errors",
    labelnames=["context"],
    registry=push_registry,
)

_REPO_PREFIX = re.compile(r"^/?repos/[^/]+/[^/]+")


def _normalize_api_endpoint(endpoint: str) -> str:
    path = endpoint.split("?", 1)[0]
    if not path.startswith("/") and "/" not in path:
        return path
    match = _REPO_PREFIX.match(path)
    if match is None:
        return "other"
    rest = path[match.end() :].strip("/")
    if rest == "":
        return "repository"
    first = rest.split("/", 1)[0]
    if first == "contents":
        return "contents/xxx"
    return first


def record_api_call(endpoint: str) -> None:
    api_call_count.labels(endpoint=_normalize_api_endpoint(endpoint)).inc()
