import logging
from typing import Any, AsyncIterator, Optional

from gidgethub.abc import GitHubAPI

from branchsource.github.model import Branch, PullRequest, Repository
from branchsource.metric import record_api_call
from branchsource.scm.types import RepositoryRef

logger = logging.getLogger("branchsource")


class API:
    gh: GitHubAPI
    installation: Optional[int]

    call_count: int

    def __init__(self, gh: GitHubAPI, installation: Optional[int] = None):
        self.gh = gh
        self.installation = installation
        self.call_count = 0

    def _count(self, url: str) -> None:
        self.call_count += 1
        record_api_call(endpoint=url)

    async def get_repository(self, repo: RepositoryRef) -> Repository:
        url = f"/repos/{repo.owner}/{repo.name}"
        self._count(url)
        logger.debug("Get repository %s", url)
        return Repository.model_validate(await self.gh.getitem(url))

    async def get_branches(self, repo: RepositoryRef) -> AsyncIterator[Branch]:
        url = f"/repos/{repo.owner}/{repo.name}/branches"
        self._count(url)
        logger.debug("Get branches %s", url)
        async for item in self.gh.getiter(url):
            yield Branch.model_validate(item)

    async def get_branch(self, repo: RepositoryRef, name: str) -> Branch:
        url = f"/repos/{repo.owner}/{repo.name}/branches/{{branch}}"
        self._count(url)
        logger.debug("Get branch %s of %s", name, repo)
        item = await self.gh.getitem(url, url_vars={"branch": name})
        return Branch.model_validate(item)

    async def get_pulls(
        self, repo: RepositoryRef, state: str = "open"
    ) -> AsyncIterator[PullRequest]:
        url = f"/repos/{repo.owner}/{repo.name}/pulls"
        self._count(url)
        logger.debug("Get %s pulls %s", state, url)
        async for item in self.gh.getiter(url + "{?state}", url_vars={"state": state}):
            yield PullRequest.model_validate(item)

    async def get_pull(self, repo: RepositoryRef, number: int) -> PullRequest:
        url = f"/repos/{repo.owner}/{repo.name}/pulls/{number}"
        self._count(url)
        logger.debug("Get pull %s", url)
        return PullRequest.model_validate(await self.gh.getitem(url))

    async def get_content(self, repo: RepositoryRef, path: str, ref: str) -> Any:
        """Raw contents response, a list for directories."""
        url = f"/repos/{repo.owner}/{repo.name}/contents/"
        self._count(url + path)
        logger.debug("Get file content: %s%s @ %s", url, path, ref)
        return await self.gh.getitem(
            url + "{+path}{?ref}", url_vars={"path": path, "ref": ref}
        )
