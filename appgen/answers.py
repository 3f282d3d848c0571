"""
answers.py

Responsibility: Load a YAML file of preset answers so the scaffolder can run unattended.

Example:

    empty: false          # proceed even when the destination is not empty
    stack: alpha
    title: My Cool App
    repo: false
    use_yarn: true
    deploy_tool: netlify
    github_owner: my-org

Every key is optional; a preset answer skips the matching prompt.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from appgen.environment import GH_PAGES, NETLIFY


class AnswersError(ValueError):
    pass


_FIELDS: dict[str, type] = {
    "empty": bool,
    "stack": str,
    "title": str,
    "repo": bool,
    "use_yarn": bool,
    "deploy_tool": str,
    "github_owner": str,
}

DEPLOY_TOOLS = (NETLIFY, GH_PAGES)


def parse_answers(data: Any, *, origin: str = "<answers>") -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise AnswersError(f"Answers in {origin} must be a mapping/object at the top level.")

    out: dict[str, Any] = {}
    for key, value in data.items():
        expected = _FIELDS.get(str(key))
        if expected is None:
            raise AnswersError(f"Unknown answer `{key}` in {origin} (expected one of: {', '.join(_FIELDS)})")
        if not isinstance(value, expected):
            raise AnswersError(f"`{key}` must be a {expected.__name__} in {origin}")
        if expected is str:
            value = value.strip()
        out[str(key)] = value

    tool = out.get("deploy_tool")
    if tool is not None and tool not in DEPLOY_TOOLS:
        raise AnswersError(f"`deploy_tool` must be one of {', '.join(DEPLOY_TOOLS)} in {origin}")
    return out


def load_answers(path: str | Path) -> dict[str, Any]:
    """Parse an answers file into a plain dict of validated preset answers."""
    p = Path(path)
    if not p.exists():
        raise AnswersError(f"Answers file does not exist: {p}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise AnswersError(f"Answers file is not valid YAML: {p}") from e
    return parse_answers(data, origin=str(p))
