"""
deploy.py

Responsibility: Deploy tool glue: host naming, the deploy command baked into templates,
and the one-time site setup commands.
"""

from __future__ import annotations

from appgen.environment import GH_PAGES, NETLIFY
from appgen.naming import kebab_case


def host_name(appname: str, username: str) -> str:
    return f"{kebab_case(appname)}-{username}"


def deploy_url(host: str) -> str:
    return f"https://{host}.netlify.com"


def deploy_command(tool: str | None, deploy_dir: str) -> str:
    if tool == GH_PAGES:
        return f"gh-pages -d {deploy_dir}"
    if tool == NETLIFY:
        return f"netlify deploy --prod --dir={deploy_dir}"
    return "echo 'You have no deployment tool configured'"


def site_commands(tool: str | None, host: str) -> list[list[str]]:
    """Commands that create and link the remote site; gh-pages needs none."""
    if tool != NETLIFY:
        return []
    return [
        [NETLIFY, "sites:create", "--name", host],
        [NETLIFY, "link", "--name", host],
    ]
