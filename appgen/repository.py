"""
repository.py

Responsibility: Initialize the generated project's git repository and publish it to GitHub.

Every step is best-effort: failures are logged and recorded in the StepReport, and the
files already written stay in place.
"""

from __future__ import annotations

import logging
from pathlib import Path

from appgen.github_client import GitHubClient, GitHubError
from appgen.shell import StepReport, run_steps

logger = logging.getLogger(__name__)

BRANCH = "main"
COMMIT_MESSAGE = "Initial commit"


def init_commands(message: str = COMMIT_MESSAGE) -> list[list[str]]:
    return [
        ["git", "init"],
        ["git", "checkout", "-B", BRANCH],
        ["git", "add", "--all"],
        ["git", "commit", "--message", message],
    ]


def publish_commands(remote_url: str) -> list[list[str]]:
    return [
        ["git", "remote", "add", "origin", remote_url],
        ["git", "push", "--set-upstream", "origin", BRANCH],
    ]


def init_repository(destination: Path, *, report: StepReport) -> bool:
    return run_steps(init_commands(), cwd=destination, report=report)


def publish_repository(
    destination: Path,
    *,
    name: str,
    description: str,
    homepage: str,
    token: str | None,
    owner: str | None,
    private: bool,
    report: StepReport,
    client: GitHubClient | None = None,
) -> bool:
    """
    Create (or reuse) the GitHub repository, add it as `origin` and push.

    Without a token (or with a blank one) the GitHub step is skipped with a warning; the local repository
    is left as is.
    """
    if client is None and not (token and token.strip()):
        logger.warning("No GitHub token (use --github-token or set GITHUB_TOKEN); skipping GitHub repository creation")
        return False

    try:
        if client is None:
            client = GitHubClient(token)
        owner = owner or client.viewer_login()
        repo = client.get_repo(owner, name)
        if repo is None:
            repo = client.create_repo(
                name=name,
                owner=owner,
                private=private,
                description=description,
                homepage=homepage,
            )
            logger.info("Created GitHub repository %s", repo.html_url)
        else:
            logger.info("Using existing GitHub repository %s", repo.html_url)
    except GitHubError as e:
        logger.error("%s", e)
        report.failures.append(e)
        return False

    return run_steps(publish_commands(repo.clone_url), cwd=destination, report=report)
