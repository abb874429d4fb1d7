import asyncio
from contextlib import asynccontextmanager
import logging
from typing import AsyncIterator, Optional

import aiocache
import aiohttp
from gidgethub import BadRequest, GitHubException
from gidgethub import aiohttp as gh_aiohttp
from gidgethub.apps import get_installation_access_token

from branchsource import config as app_config
from branchsource.github.api import API
from branchsource.github.model import Content
from branchsource.metric import error_counter
from branchsource.model import BuildPolicy, InvalidPolicy, parse_policy
from branchsource.scm.connector import (
    BranchListing,
    PullRequestListing,
    RepositoryMetadata,
)
from branchsource.scm.errors import ConnectorError
from branchsource.scm.types import FileType, RepositoryRef

logger = logging.getLogger("branchsource")

_CONTENT_TYPES = {
    "file": FileType.REGULAR_FILE,
    "dir": FileType.DIRECTORY,
}


@aiocache.cached(ttl=app_config.ACCESS_TOKEN_TTL, key_builder=lambda fn, gh, id: id)
async def get_access_token(gh: gh_aiohttp.GitHubAPI, installation_id: int) -> str:
    logger.debug("Getting NEW installation access token for %d", installation_id)
    access_token_response = await get_installation_access_token(
        gh,
        installation_id=installation_id,
        app_id=app_config.GITHUB_APP_ID,
        private_key=app_config.GITHUB_PRIVATE_KEY,
    )

    token = access_token_response["token"]
    return token


@asynccontextmanager
async def translate_errors(context: str):
    try:
        yield
    except BadRequest as e:
        if e.status_code != 404:
            error_counter.labels(context=context).inc()
        raise ConnectorError(
            f"GitHub rejected {context}: {e}", status_code=int(e.status_code)
        ) from e
    except GitHubException as e:
        error_counter.labels(context=context).inc()
        raise ConnectorError(f"GitHub request for {context} failed: {e}") from e
    except aiohttp.ClientError as e:
        error_counter.labels(context=context).inc()
        raise ConnectorError(f"Connection error during {context}: {e}") from e


class GitHubConnector:
    """Repository connector backed by the GitHub REST API.

    GitHub computes the merge commit of a pull request in the background; while
    ``mergeable`` is still unknown the pull request is fetched again up to
    ``merge_hash_retries`` times.
    """

    def __init__(
        self,
        api: API,
        *,
        merge_hash_retries: int = 3,
        merge_hash_retry_delay: float = 1.0,
    ):
        self.api = api
        self.merge_hash_retries = merge_hash_retries
        self.merge_hash_retry_delay = merge_hash_retry_delay

    async def list_branches(self, repo: RepositoryRef) -> AsyncIterator[BranchListing]:
        async with translate_errors("list_branches"):
            async for branch in self.api.get_branches(repo):
                yield branch.to_listing()

    async def list_pull_requests(
        self, repo: RepositoryRef
    ) -> AsyncIterator[PullRequestListing]:
        async with translate_errors("list_pull_requests"):
            async for pr in self.api.get_pulls(repo, state="open"):
                yield pr.to_listing()

    async def get_branch(self, repo: RepositoryRef, name: str) -> BranchListing:
        async with translate_errors("get_branch"):
            branch = await self.api.get_branch(repo, name)
        return branch.to_listing()

    async def merge_hash(self, repo: RepositoryRef, number: int) -> Optional[str]:
        async with translate_errors("merge_hash"):
            for attempt in range(self.merge_hash_retries + 1):
                pr = await self.api.get_pull(repo, number)
                if pr.mergeable is not None:
                    break
                if attempt < self.merge_hash_retries:
                    logger.debug(
                        "Mergeability of %s#%d not known yet, retrying", repo, number
                    )
                    await asyncio.sleep(self.merge_hash_retry_delay)
        if not pr.mergeable:
            logger.info("%s#%d has no usable merge commit", repo, number)
            return None
        return pr.merge_commit_sha

    async def repository_metadata(self, repo: RepositoryRef) -> RepositoryMetadata:
        async with translate_errors("repository"):
            repository = await self.api.get_repository(repo)
        if repository.default_branch is None:
            raise ConnectorError(f"{repo} has no default branch")
        return repository.to_metadata()

    async def default_branch(self, repo: RepositoryRef) -> str:
        metadata = await self.repository_metadata(repo)
        return metadata.default_branch

    async def stat(self, repo: RepositoryRef, revision: str, path: str) -> FileType:
        try:
            async with translate_errors("stat"):
                item = await self.api.get_content(repo, path, ref=revision)
        except ConnectorError as e:
            if e.status_code == 404:
                return FileType.ABSENT
            raise
        if isinstance(item, list):
            return FileType.DIRECTORY
        return _CONTENT_TYPES.get(item.get("type"), FileType.OTHER)


async def get_policy_from_repo(
    api: API, repo: RepositoryRef, ref: str
) -> Optional[BuildPolicy]:
    path = app_config.REPO_POLICY_PATH
    try:
        async with translate_errors("policy"):
            item = await api.get_content(repo, path, ref=ref)
    except ConnectorError as e:
        if e.status_code == 404:
            return None
        raise

    if isinstance(item, list) or item.get("type") != "file":
        raise InvalidPolicy(f"{path} is not a file", raw_config="", source=path)
    content = Content.model_validate(item)

    return parse_policy(content.decoded_content(), source=content.html_url or content.path)
