import asyncio
from contextlib import asynccontextmanager
import logging
from typing import List, Optional

import aiohttp
import cachetools
from gidgethub import aiohttp as gh_aiohttp
from prometheus_client import push_to_gateway
from tabulate import tabulate
import typer

from branchsource import config
from branchsource.github import GitHubConnector, get_access_token, get_policy_from_repo
from branchsource.github.api import API
from branchsource.logger import add_alert_handler
from branchsource.metric import push_registry
from branchsource.model import BuildPolicy, load_policy
from branchsource.scm import (
    BranchRevision,
    FirstMatchCollector,
    HeadCollector,
    PullRequestRevision,
    RepositoryRef,
    Revision,
    all_of,
    always,
    evaluate_trust,
    fetch,
    file_exists,
)

logging.basicConfig(
    format="%(asctime)s %(name)s %(levelname)s - %(message)s", level=logging.INFO
)
logger = logging.getLogger("branchsource")

app = typer.Typer()
httpcache = cachetools.LRUCache(maxsize=config.HTTP_CACHE_SIZE)


@app.callback()
def init():
    logging.getLogger().setLevel(config.OVERRIDE_LOGGING)
    logger.setLevel(config.OVERRIDE_LOGGING)
    add_alert_handler(logger)


@asynccontextmanager
async def github_client(installation: Optional[int] = None):
    async with aiohttp.ClientSession() as session:
        token = config.GITHUB_TOKEN
        if installation is not None:
            gh = gh_aiohttp.GitHubAPI(
                session, "branchsource", base_url=config.GITHUB_API_URL
            )
            token = await get_access_token(gh, installation)
        elif token is None:
            logger.warning("No GITHUB_TOKEN set, using anonymous access")

        yield gh_aiohttp.GitHubAPI(
            session,
            "branchsource",
            oauth_token=token,
            cache=httpcache,
            base_url=config.GITHUB_API_URL,
        )


async def resolve_policy(
    api: API, repo: RepositoryRef, policy_file: Optional[str], from_repo: bool
) -> BuildPolicy:
    if from_repo:
        default_branch = await GitHubConnector(api).default_branch(repo)
        policy = await get_policy_from_repo(api, repo, ref=default_branch)
        if policy is not None:
            logger.info("Using build policy from %s@%s", repo, default_branch)
            return policy
        logger.info("No build policy in %s, falling back", repo)
    return load_policy(policy_file or config.POLICY_FILE)


def revision_row(repo: RepositoryRef, revision: Revision, policy: BuildPolicy):
    verdict = evaluate_trust(repo, revision, policy).value
    if isinstance(revision, BranchRevision):
        return (revision.head.name, "branch", revision.hash, "", "", verdict)
    if isinstance(revision, PullRequestRevision):
        head = revision.head
        return (
            head.name,
            f"{head.origin.value} pr ({head.checkout_strategy.value})",
            revision.pull_hash,
            revision.base_hash,
            revision.merge_hash or "",
            verdict,
        )
    raise TypeError(f"Unknown revision type {type(revision).__name__}")


def push_metrics():
    if config.PUSH_GATEWAY is None:
        return
    try:
        push_to_gateway(config.PUSH_GATEWAY, job="branchsource", registry=push_registry)
    except OSError:
        logger.error("Pushing metrics to %s failed", config.PUSH_GATEWAY, exc_info=True)


@app.command("fetch")
def fetch_heads(
    repo: str,
    policy: Optional[str] = typer.Option(None, help="YAML build policy file"),
    policy_from_repo: bool = typer.Option(
        False, help="Read the build policy from the default branch"
    ),
    require: List[str] = typer.Option(
        [], help="Path that must exist as a regular file"
    ),
    head: List[str] = typer.Option([], help="Only consider heads with this name"),
    installation: Optional[int] = typer.Option(None),
    first: bool = typer.Option(False, help="Stop after the first matching head"),
):
    repo_ref = RepositoryRef.parse(repo)
    criterion = all_of(*(file_exists(p) for p in require)) if require else always

    async def handle():
        async with github_client(installation) as gh:
            api = API(gh, installation)
            build_policy = await resolve_policy(api, repo_ref, policy, policy_from_repo)
            collector = FirstMatchCollector() if first else HeadCollector()
            await fetch(
                repo_ref,
                criterion,
                collector,
                build_policy,
                GitHubConnector(api),
                heads=head or None,
            )
            rows = [
                revision_row(repo_ref, revision, build_policy)
                for revision in collector.result().values()
            ]
            typer.echo(
                tabulate(
                    rows,
                    headers=("Head", "Kind", "Revision", "Base", "Merge", "Trust"),
                    tablefmt="github",
                )
            )
            logger.info("Finished fetching %s, API calls: %d", repo_ref, api.call_count)

    try:
        asyncio.run(handle())
    finally:
        push_metrics()


@app.command()
def default_branch(repo: str, installation: Optional[int] = typer.Option(None)):
    repo_ref = RepositoryRef.parse(repo)

    async def handle():
        async with github_client(installation) as gh:
            connector = GitHubConnector(API(gh, installation))
            typer.echo(await connector.default_branch(repo_ref))

    asyncio.run(handle())


@app.command()
def metadata(repo: str, installation: Optional[int] = typer.Option(None)):
    repo_ref = RepositoryRef.parse(repo)

    async def handle():
        async with github_client(installation) as gh:
            connector = GitHubConnector(API(gh, installation))
            info = await connector.repository_metadata(repo_ref)
            rows = [
                ("Default branch", info.default_branch),
                ("Link", info.html_url or ""),
                ("Description", info.description or ""),
                ("Homepage", info.homepage or ""),
            ]
            typer.echo(tabulate(rows, tablefmt="plain"))

    asyncio.run(handle())


@app.command()
def trust(
    repo: str,
    number: int,
    policy: Optional[str] = typer.Option(None, help="YAML build policy file"),
    installation: Optional[int] = typer.Option(None),
):
    repo_ref = RepositoryRef.parse(repo)

    async def handle():
        async with github_client(installation) as gh:
            api = API(gh, installation)
            build_policy = load_policy(policy or config.POLICY_FILE)
            # resolve with every strategy so each one can be judged
            scan_policy = BuildPolicy(
                build_origin_pr_head=True,
                build_origin_pr_merge=True,
                build_fork_pr_head=True,
                build_fork_pr_merge=True,
            )
            collector = HeadCollector()
            await fetch(
                repo_ref,
                always,
                collector,
                scan_policy,
                GitHubConnector(api),
                heads=[f"PR-{number}-head", f"PR-{number}-merge"],
            )
            rows = [
                revision_row(repo_ref, revision, build_policy)
                for revision in collector.result().values()
            ]
            if not rows:
                typer.echo(f"No open pull request #{number} in {repo_ref}", err=True)
                raise typer.Exit(1)
            typer.echo(
                tabulate(
                    rows,
                    headers=("Head", "Kind", "Revision", "Base", "Merge", "Trust"),
                    tablefmt="github",
                )
            )

    asyncio.run(handle())


def main():
    app()
