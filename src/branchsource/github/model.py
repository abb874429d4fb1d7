import base64
from datetime import datetime
from typing import Annotated, Literal, Optional

import pydantic
from pydantic import AfterValidator

from branchsource.scm.connector import (
    BranchListing,
    PullRequestListing,
    RepositoryMetadata,
)


class Model(pydantic.BaseModel):
    pass


def _validate_commit_sha(sha: str) -> str:
    if len(sha) != 40:
        raise ValueError("Commit hash must have length 40")
    try:
        int(sha, 16)
    except ValueError:
        raise ValueError("Commit hash must be hexadecimal") from None
    return sha.lower()


CommitSha = Annotated[str, AfterValidator(_validate_commit_sha)]


class Owner(Model):
    login: str


class Repository(Model):
    id: int
    name: str
    full_name: Optional[str] = None
    owner: Owner
    url: str
    html_url: Optional[str] = None
    private: Optional[bool] = None
    description: Optional[str] = None
    homepage: Optional[str] = None
    default_branch: Optional[str] = None

    def to_metadata(self) -> RepositoryMetadata:
        return RepositoryMetadata(
            default_branch=self.default_branch,
            html_url=self.html_url,
            description=self.description,
            homepage=self.homepage or None,
        )


class BranchCommit(Model):
    sha: CommitSha


class Branch(Model):
    name: str
    commit: BranchCommit
    protected: Optional[bool] = None

    def to_listing(self) -> BranchListing:
        return BranchListing(name=self.name, tip=self.commit.sha)


class PrConnection(Model):
    label: Optional[str] = None
    ref: str
    sha: CommitSha
    user: Optional[Owner] = None
    # null when the source repository of a pull request was deleted
    repo: Optional[Repository] = None

    @property
    def owner(self) -> str:
        if self.repo is not None:
            return self.repo.owner.login
        if self.user is not None:
            return self.user.login
        if self.label is not None and ":" in self.label:
            return self.label.split(":", 1)[0]
        raise ValueError(f"Cannot determine owner of {self.ref}")


class PullRequest(Model):
    url: str
    id: int
    number: int
    state: Literal["open", "closed"]
    title: Optional[str] = None
    base: PrConnection
    head: PrConnection
    html_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    merge_commit_sha: Optional[CommitSha] = None
    mergeable: Optional[bool] = None

    def __str__(self) -> str:
        name = self.base.repo.full_name if self.base.repo is not None else self.url
        return f"PR({name}#{self.number}, {self.id})"

    def to_listing(self) -> PullRequestListing:
        source_repo = self.head.repo.name if self.head.repo is not None else ""
        return PullRequestListing(
            number=self.number,
            source_owner=self.head.owner,
            source_repo=source_repo,
            source_branch=self.head.ref,
            source_tip=self.head.sha,
            target_branch=self.base.ref,
        )


class Content(Model):
    type: Literal["file", "dir", "symlink", "submodule"]
    name: str
    path: str
    sha: str
    size: int = 0
    url: Optional[str] = None
    html_url: Optional[str] = None
    download_url: Optional[str] = None
    encoding: Optional[str] = None
    content: Optional[str] = None

    def decoded_content(self) -> str:
        if self.encoding != "base64" or self.content is None:
            raise ValueError(f"Unknown encoding {self.encoding}")
        return base64.b64decode(self.content).decode()
