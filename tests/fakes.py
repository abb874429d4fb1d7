from __future__ import annotations

from typing import Dict, List, Optional, Union

from branchsource.scm import (
    BranchListing,
    ConnectorError,
    FileType,
    PullRequestListing,
    RepositoryMetadata,
    RepositoryRef,
)

MASTER_SHA = "8f1314fc3c8284d8c6d5886d473db98f2126071c"
PATCH_SHA = "095e69602bb95a278505e937e41d505ac3cdd263"
PR_SHA = "c0e024f89969b976da165eecaa71e09dc60c3da1"
MERGE_SHA = "38814ca33833ff5fb3d0a2b3a8f9b2f2e0f0a4c1"


class FakeConnector:
    def __init__(
        self,
        *,
        branches: List[BranchListing],
        pulls: List[PullRequestListing],
        files: Dict[str, Dict[str, FileType]],
        merge_hashes: Optional[Dict[int, Union[str, None, Exception]]] = None,
        extra_branches: Optional[Dict[str, str]] = None,
        default: str = "master",
        page_size: int = 100,
    ):
        self.branches = branches
        self.pulls = pulls
        self.files = files
        self.merge_hashes = merge_hashes or {}
        self.extra_branches = extra_branches or {}
        self.default = default
        self.page_size = page_size
        self.calls: List[tuple] = []

    async def _pages(self, name, items):
        for start in range(0, len(items), self.page_size):
            self.calls.append((name, start // self.page_size))
            for item in items[start : start + self.page_size]:
                yield item

    async def list_branches(self, repo: RepositoryRef):
        async for item in self._pages("list_branches", self.branches):
            yield item

    async def list_pull_requests(self, repo: RepositoryRef):
        async for item in self._pages("list_pull_requests", self.pulls):
            yield item

    async def get_branch(self, repo: RepositoryRef, name: str) -> BranchListing:
        self.calls.append(("get_branch", name))
        for branch in self.branches:
            if branch.name == name:
                return branch
        if name in self.extra_branches:
            return BranchListing(name=name, tip=self.extra_branches[name])
        raise ConnectorError(f"no branch {name}", status_code=404)

    async def merge_hash(self, repo: RepositoryRef, number: int) -> Optional[str]:
        self.calls.append(("merge_hash", number))
        value = self.merge_hashes.get(number)
        if isinstance(value, Exception):
            raise value
        return value

    async def default_branch(self, repo: RepositoryRef) -> str:
        self.calls.append(("default_branch",))
        return self.default

    async def repository_metadata(self, repo: RepositoryRef) -> RepositoryMetadata:
        self.calls.append(("repository_metadata",))
        return RepositoryMetadata(default_branch=self.default)

    async def stat(self, repo: RepositoryRef, revision: str, path: str) -> FileType:
        self.calls.append(("stat", revision, path))
        return self.files.get(revision, {}).get(path, FileType.ABSENT)

    def count(self, name: str) -> int:
        return len([c for c in self.calls if c[0] == name])


def make_sha(n: int) -> str:
    return f"{n:040x}"


def make_yolo_connector() -> FakeConnector:
    readme = {"README.md": FileType.REGULAR_FILE}
    return FakeConnector(
        branches=[
            BranchListing("master", MASTER_SHA),
            BranchListing("stephenc-patch-1", PATCH_SHA),
        ],
        pulls=[
            PullRequestListing(
                number=1,
                source_owner="stephenc",
                source_repo="yolo",
                source_branch="patch-1",
                source_tip=PR_SHA,
                target_branch="master",
            )
        ],
        files={sha: dict(readme) for sha in (MASTER_SHA, PATCH_SHA, PR_SHA)},
        merge_hashes={1: MERGE_SHA},
    )


def repo_payload(owner, name="yolo", **kwargs):
    return {
        "id": 1 if owner == "cloudbeers" else 2,
        "name": name,
        "full_name": f"{owner}/{name}",
        "owner": {"login": owner},
        "url": f"https://api.github.com/repos/{owner}/{name}",
        "private": False,
        **kwargs,
    }


def pull_payload(**kwargs):
    payload = {
        "url": "https://api.github.com/repos/cloudbeers/yolo/pulls/1",
        "id": 5001,
        "number": 1,
        "state": "open",
        "title": "Update README.md",
        "base": {
            "label": "cloudbeers:master",
            "ref": "master",
            "sha": MASTER_SHA,
            "user": {"login": "cloudbeers"},
            "repo": repo_payload("cloudbeers"),
        },
        "head": {
            "label": "stephenc:patch-1",
            "ref": "patch-1",
            "sha": PR_SHA,
            "user": {"login": "stephenc"},
            "repo": repo_payload("stephenc"),
        },
        "merge_commit_sha": MERGE_SHA,
        "mergeable": True,
    }
    payload.update(kwargs)
    return payload


class FakeGitHub:
    def __init__(self, items=None, iters=None):
        self.items = items or {}
        self.iters = iters or {}
        self.calls = []

    def _key(self, url, url_vars):
        self.calls.append((url, dict(url_vars or {})))
        return url

    async def getitem(self, url, url_vars=None, **kwargs):
        value = self.items[self._key(url, url_vars)]
        if callable(value):
            value = value(url_vars)
        if isinstance(value, Exception):
            raise value
        return value

    async def getiter(self, url, url_vars=None, **kwargs):
        value = self.iters[self._key(url, url_vars)]
        if isinstance(value, Exception):
            raise value
        for item in value:
            yield item


def yolo_github():
    readme = {"type": "file", "name": "README.md", "path": "README.md", "sha": "x"}
    return FakeGitHub(
        items={
            "/repos/cloudbeers/yolo": repo_payload(
                "cloudbeers",
                default_branch="master",
                description="You only live once",
                homepage="",
                html_url="https://github.com/cloudbeers/yolo",
            ),
            "/repos/cloudbeers/yolo/pulls/1": pull_payload(),
            "/repos/cloudbeers/yolo/contents/{+path}{?ref}": lambda v: readme,
        },
        iters={
            "/repos/cloudbeers/yolo/branches": [
                {"name": "master", "commit": {"sha": MASTER_SHA}},
                {"name": "stephenc-patch-1", "commit": {"sha": PATCH_SHA}},
            ],
            "/repos/cloudbeers/yolo/pulls{?state}": [pull_payload()],
        },
    )
