"""
shell.py

Responsibility: Run external tools (package managers, git, deploy CLIs) and surface failures.

Commands run synchronously with output streamed to the user's terminal. A non-zero exit
or a missing executable becomes a CommandError; `run_steps` turns those into logged,
recorded failures so that independent follow-up steps still run.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    def __init__(self, cmd: Sequence[str], returncode: int | None, detail: str = "") -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        status = "could not be started" if returncode is None else f"exited with status {returncode}"
        message = f"Command {status}: {' '.join(cmd)}"
        if detail:
            message = f"{message}\n\n{detail}"
        super().__init__(message)


@dataclass
class StepReport:
    """Failures collected while running best-effort steps."""

    failures: list[Exception] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def run_command(cmd: Sequence[str], *, cwd: str | Path) -> None:
    """
    Run a subprocess command, raising a CommandError on failure.
    """
    logger.debug("Running %s in %s", " ".join(cmd), cwd)
    try:
        subprocess.run(list(cmd), cwd=str(cwd), check=True)
    except FileNotFoundError as e:
        raise CommandError(cmd, None, str(e)) from e
    except subprocess.CalledProcessError as e:
        raise CommandError(cmd, e.returncode) from e


def run_steps(commands: Sequence[Sequence[str]], *, cwd: str | Path, report: StepReport, stop_on_failure: bool = True) -> bool:
    """
    Run `commands` in order. Failures are logged and appended to `report`.

    With stop_on_failure, the remaining commands of this group are skipped after the
    first failure (later commands usually depend on earlier ones). Returns True when
    every command succeeded.
    """
    ok = True
    for cmd in commands:
        try:
            run_command(cmd, cwd=cwd)
        except CommandError as e:
            logger.error("%s", e)
            report.failures.append(e)
            ok = False
            if stop_on_failure:
                break
    return ok
