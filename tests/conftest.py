"""Shared pytest fixtures for the appgen test suite.

Provides reusable fixtures for:
- A small resources tree (config/ + templates/) with `alpha` and `beta` stacks
- A scripted prompter that answers questions from a dict
- Fake capability records
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from appgen.environment import Capabilities

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


class ScriptedPrompter:
    """Answers from a dict; falls back to the default. Records every question asked."""

    def __init__(self, answers: dict[str, Any] | None = None) -> None:
        self.answers = dict(answers or {})
        self.asked: list[tuple[str, str, Any]] = []

    def _answer(self, kind: str, message: str, default: Any) -> Any:
        self.asked.append((kind, message, default))
        for key, value in self.answers.items():
            if key in message:
                return value
        return default

    def confirm(self, message: str, default: bool) -> bool:
        return self._answer("confirm", message, default)

    def text(self, message: str, default: str) -> str:
        return self._answer("input", message, default)

    def choose(self, message, choices, default):
        return self._answer("list", message, default)


# ---------------------------------------------------------------------------
# Resources tree
# ---------------------------------------------------------------------------

@pytest.fixture
def resources_dir(tmp_path: Path) -> Path:
    """Config + templates for two stacks; common files come first."""
    root = tmp_path / "resources"
    config = root / "config"
    templates = root / "templates"

    write_json(config / "stacks.json", {"alpha": "Alpha stack", "beta": "Beta stack"})
    write_json(
        config / "common.json",
        {
            "installFiles": {
                "common/README.md": "README.md",
                "common/logo.png": "assets/logo.png",
                "common/gitignore": ".gitignore",
            },
            "dependencies": ["shared-lib"],
            "devDependencies": ["prettier"],
        },
    )
    write_json(
        config / "alpha.json",
        {
            "installFiles": {
                "alpha/index.html": "src/index.html",
                "alpha/README.md": "README.md",
            },
            "dependencies": ["shared-lib", "alpha-lib"],
            "devDependencies": ["parcel"],
            "deployDir": "public",
        },
    )
    write_json(
        config / "beta.json",
        {"installFiles": {"beta/main.js": "src/main.js"}, "dependencies": [], "devDependencies": []},
    )

    (templates / "common").mkdir(parents=True)
    (templates / "alpha").mkdir()
    (templates / "beta").mkdir()
    (templates / "common" / "README.md").write_text("# {{ title }}\n\ncommon readme\n", encoding="utf-8")
    (templates / "common" / "logo.png").write_bytes(PNG_BYTES)
    (templates / "common" / "gitignore").write_text("node_modules\n", encoding="utf-8")
    (templates / "alpha" / "index.html").write_text("<title>{{ title }}</title>\n", encoding="utf-8")
    (templates / "alpha" / "README.md").write_text("# {{ title }} (alpha)\n", encoding="utf-8")
    (templates / "beta" / "main.js").write_text("console.log('hi')\n", encoding="utf-8")
    return root


@pytest.fixture
def config_root(resources_dir: Path) -> Path:
    return resources_dir / "config"


@pytest.fixture
def template_root(resources_dir: Path) -> Path:
    return resources_dir / "templates"


@pytest.fixture
def caps() -> Capabilities:
    return Capabilities(username="tester")


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()
