"""
environment.py

Responsibility: Check the machine once for the optional tools and identity the flow depends on.

The result is an immutable `Capabilities` record; later steps read it instead of
checking PATH or the environment themselves.
"""

from __future__ import annotations

import os
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping

NETLIFY = "netlify"
GH_PAGES = "gh-pages"

_USERNAME_UNSAFE = re.compile(r"[^a-zA-Z0-9+]")


class CapabilityError(RuntimeError):
    pass


@dataclass(frozen=True)
class Capabilities:
    has_yarn: bool = False
    has_netlify: bool = False
    has_gh_pages: bool = False
    in_git_repo: bool = False
    username: str = ""


def username_from_env(environ: Mapping[str, str]) -> str:
    raw = environ.get("USER") or environ.get("USERNAME") or ""
    if not raw:
        raise CapabilityError("Cannot determine the current user: neither USER nor USERNAME is set")
    return _USERNAME_UNSAFE.sub("-", raw)


def inside_git_repo(path: Path) -> bool:
    """True when `path` or one of its ancestors holds a `.git` entry."""
    current = path.resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return True
    return False


def detect_capabilities(
    destination: str | Path,
    *,
    which: Callable[[str], str | None] = shutil.which,
    environ: Mapping[str, str] | None = None,
) -> Capabilities:
    env = os.environ if environ is None else environ
    return Capabilities(
        has_yarn=which("yarn") is not None,
        has_netlify=which(NETLIFY) is not None,
        has_gh_pages=which(GH_PAGES) is not None,
        in_git_repo=inside_git_repo(Path(destination)),
        username=username_from_env(env),
    )


def default_deploy_tool(caps: Capabilities) -> str | None:
    """The deploy tool implied by what is installed; None when ambiguous or absent."""
    if caps.has_netlify and not caps.has_gh_pages:
        return NETLIFY
    if caps.has_gh_pages and not caps.has_netlify:
        return GH_PAGES
    return None
