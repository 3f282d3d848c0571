"""
stacks.py

Responsibility: Resolve a stack identifier into the configuration documents that drive generation.

Layout of a config root:
- `stacks.json`: `{ "<stack id>": "<human readable label>", ... }`
- `common.json`: applied to every stack, before the stack's own config
- `<stack id>.json`: stack specific config

Each config document is shaped as:
    {
      "installFiles": {"<template path>": "<destination path>", ...},
      "dependencies": ["..."],
      "devDependencies": ["..."],
      "deployDir": "dist"            # optional
    }

Nothing here touches the destination directory; resolution either succeeds completely
or raises before any file is written.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

logger = logging.getLogger(__name__)

REGISTRY_FILE = "stacks.json"
COMMON_CONFIG = "common"
DEFAULT_DEPLOY_DIR = "dist"


class StackConfigError(ValueError):
    pass


class UnknownStackError(StackConfigError):
    def __init__(self, stack_id: str, known: list[str]) -> None:
        self.stack_id = stack_id
        self.known = known
        super().__init__(f"Unknown stack ({stack_id}). Supported stacks are: {', '.join(known)}")


@dataclass(frozen=True)
class StackConfig:
    """One parsed config document."""

    install_files: tuple[tuple[str, str], ...] = ()
    dependencies: tuple[str, ...] = ()
    dev_dependencies: tuple[str, ...] = ()
    deploy_dir: str | None = None


@dataclass(frozen=True)
class ResolvedStack:
    """The common and stack specific configs for one stack, plus their merged view."""

    stack_id: str
    label: str
    common: StackConfig
    stack: StackConfig

    @property
    def install_files(self) -> tuple[tuple[str, str], ...]:
        return self.common.install_files + self.stack.install_files

    @property
    def dependencies(self) -> tuple[str, ...]:
        return _unique(self.common.dependencies + self.stack.dependencies)

    @property
    def dev_dependencies(self) -> tuple[str, ...]:
        return _unique(self.common.dev_dependencies + self.stack.dev_dependencies)

    @property
    def deploy_dir(self) -> str:
        return self.stack.deploy_dir or self.common.deploy_dir or DEFAULT_DEPLOY_DIR


def _unique(items: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(items))


def _read_json(path: Path) -> Any:
    if not path.is_file():
        raise StackConfigError(f"Config file does not exist: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise StackConfigError(f"Config file is not readable: {path}") from e
    except ValueError as e:
        raise StackConfigError(f"Config file is not valid JSON: {path} ({e})") from e


def _string_list(data: dict[str, Any], key: str, path: Path) -> tuple[str, ...]:
    raw = data.get(key)
    if raw is None:
        return ()
    if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
        raise StackConfigError(f"`{key}` must be a list of strings in {path}")
    return tuple(raw)


def load_registry(config_root: str | Path) -> Mapping[str, str]:
    """Return the read-only `{stack id: label}` registry, in declaration order."""
    path = Path(config_root) / REGISTRY_FILE
    data = _read_json(path)
    if not isinstance(data, dict) or not data:
        raise StackConfigError(f"Stack registry must be a non-empty object: {path}")
    registry = {str(k): str(v) for k, v in data.items()}
    return MappingProxyType(registry)


def load_stack_config(path: str | Path) -> StackConfig:
    """
    Parse a single config document.

    `installFiles` is required (it may be empty); the dependency lists and
    `deployDir` are optional.
    """
    p = Path(path)
    data = _read_json(p)
    if not isinstance(data, dict):
        raise StackConfigError(f"Config must be a JSON object at the top level: {p}")

    files_raw = data.get("installFiles")
    if not isinstance(files_raw, dict):
        raise StackConfigError(f"`installFiles` must be an object mapping source to destination in {p}")
    install_files: list[tuple[str, str]] = []
    for src, dest in files_raw.items():
        if not isinstance(dest, str) or not dest.strip() or not src.strip():
            raise StackConfigError(f"Invalid installFiles entry {src!r} -> {dest!r} in {p}")
        install_files.append((src, dest))

    deploy_dir = data.get("deployDir")
    if deploy_dir is not None and not isinstance(deploy_dir, str):
        raise StackConfigError(f"`deployDir` must be a string in {p}")

    return StackConfig(
        install_files=tuple(install_files),
        dependencies=_string_list(data, "dependencies", p),
        dev_dependencies=_string_list(data, "devDependencies", p),
        deploy_dir=deploy_dir,
    )


def resolve_stack(
    stack_id: str,
    config_root: str | Path,
    registry: Mapping[str, str] | None = None,
) -> ResolvedStack:
    """
    Resolve `stack_id` against the registry and load its configs (common first).

    Raises `UnknownStackError` (listing the known stacks) for ids missing from the
    registry, and `StackConfigError` when either config document is missing or invalid.
    """
    root = Path(config_root)
    if registry is None:
        registry = load_registry(root)
    if stack_id not in registry:
        raise UnknownStackError(stack_id, list(registry))

    common = load_stack_config(root / f"{COMMON_CONFIG}.json")
    stack = load_stack_config(root / f"{stack_id}.json")
    logger.debug(
        "Resolved stack %s: %d common files, %d stack files",
        stack_id,
        len(common.install_files),
        len(stack.install_files),
    )
    return ResolvedStack(stack_id=stack_id, label=registry[stack_id], common=common, stack=stack)
