"""
github_client.py

Responsibility: Isolate all direct GitHub REST API interaction.

This module must be the only place that:
- Constructs GitHub REST endpoints
- Sends HTTP requests to api.github.com
- Interprets GitHub API responses / error payloads

Git commands themselves live in `repository.py`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from appgen import __version__


class GitHubError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class RepoInfo:
    owner: str
    name: str
    html_url: str
    clone_url: str
    default_branch: str


def _repo_info(owner: str, name: str, data: dict[str, Any]) -> RepoInfo:
    return RepoInfo(
        owner=owner,
        name=name,
        html_url=data["html_url"],
        clone_url=data["clone_url"],
        default_branch=data.get("default_branch") or "main",
    )


class GitHubClient:
    def __init__(self, token: str, api_base: str = "https://api.github.com", timeout: float = 30) -> None:
        if not token.strip():
            raise GitHubError("GitHub token is required.")
        self._token = token
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"appgen/{__version__}",
        }

    def _request(self, method: str, path: str, *, json_body: dict[str, Any] | None = None) -> Any:
        url = f"{self._api_base}{path}"
        try:
            r = requests.request(method, url, headers=self._headers(), json=json_body, timeout=self._timeout)
        except requests.RequestException as e:
            raise GitHubError(f"GitHub API request failed {method} {path}: {e}") from e
        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {"message": r.text}
            message = payload.get("message", payload) if isinstance(payload, dict) else payload
            raise GitHubError(f"GitHub API error {r.status_code} {method} {path}: {message}", status_code=r.status_code)
        if r.status_code == 204:
            return None
        return r.json()

    def viewer_login(self) -> str:
        viewer = self._request("GET", "/user")
        return str(viewer.get("login") or "")

    def get_repo(self, owner: str, name: str) -> RepoInfo | None:
        """
        Return RepoInfo if the repo exists and is accessible; otherwise None.
        """
        try:
            data = self._request("GET", f"/repos/{owner}/{name}")
        except GitHubError as e:
            if e.status_code == 404:
                return None
            raise
        return _repo_info(owner, name, data)

    def create_repo(
        self,
        *,
        name: str,
        owner: str | None = None,
        private: bool = False,
        description: str = "",
        homepage: str = "",
    ) -> RepoInfo:
        """
        Create a new repository under either:
        - the authenticated user (owner omitted or equal to the viewer login), OR
        - an organization (any other owner).
        """
        viewer_login = self.viewer_login()
        owner = owner or viewer_login

        body = {
            "name": name,
            "private": private,
            "description": description,
            "homepage": homepage,
            "auto_init": False,
        }

        if owner == viewer_login:
            data = self._request("POST", "/user/repos", json_body=body)
        else:
            data = self._request("POST", f"/orgs/{owner}/repos", json_body=body)

        return _repo_info(owner, name, data)
