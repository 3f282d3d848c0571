"""
installer.py

Responsibility: Build and run the package manager commands for a stack's dependencies.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from appgen.shell import StepReport, run_steps

logger = logging.getLogger(__name__)


def package_manager(use_yarn: bool) -> str:
    return "yarn" if use_yarn else "npm"


def install_commands(
    use_yarn: bool,
    dependencies: Sequence[str],
    dev_dependencies: Sequence[str],
) -> list[list[str]]:
    """
    yarn: `yarn add --dev ...` then `yarn add ...`
    npm:  `npm install --save-dev ...` then `npm install --save ...`

    Empty lists are skipped; when both are empty a bare install is returned so that
    whatever the templates declared in package.json still gets installed.
    """
    if use_yarn:
        dev_cmd, runtime_cmd, bare = ["yarn", "add", "--dev"], ["yarn", "add"], ["yarn", "install"]
    else:
        dev_cmd, runtime_cmd, bare = ["npm", "install", "--save-dev"], ["npm", "install", "--save"], ["npm", "install"]

    commands: list[list[str]] = []
    if dev_dependencies:
        commands.append([*dev_cmd, *dev_dependencies])
    if dependencies:
        commands.append([*runtime_cmd, *dependencies])
    if not commands:
        commands.append(bare)
    return commands


def install(
    *,
    destination: Path,
    use_yarn: bool,
    dependencies: Sequence[str],
    dev_dependencies: Sequence[str],
    report: StepReport,
) -> bool:
    if dev_dependencies:
        logger.info("Installing development dependencies... %s", ", ".join(dev_dependencies))
    if dependencies:
        logger.info("Installing runtime dependencies... %s", ", ".join(dependencies))
    commands = install_commands(use_yarn, dependencies, dev_dependencies)
    # dev and runtime installs are independent of each other
    return run_steps(commands, cwd=destination, report=report, stop_on_failure=False)
