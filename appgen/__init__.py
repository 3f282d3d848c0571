"""
appgen package

This package implements an interactive project scaffolder as a CLI-first utility.

Key responsibilities are split across modules:
- `stacks.py`: stack registry and config resolution (common config first, then the stack's)
- `materializer.py`: render/copy declared template files into the destination
- `prompts.py`: questions as data, asked through a pluggable prompter
- `environment.py`: one-shot detection of optional tools and user identity
- `installer.py`, `repository.py`, `deploy.py`: thin wrappers around npm/yarn, git and deploy CLIs
- `github_client.py`: isolated GitHub REST API interactions (repo creation / lookup)
- `cli.py`: CLI entrypoint and orchestration (prompt -> materialize -> install -> git -> deploy)
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
