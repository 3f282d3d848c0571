"""
cli.py

Responsibility: CLI entrypoint for appgen.

High-level flow:
1) Detect optional tools (yarn, netlify, gh-pages) and the current user
2) Resolve the stack -> common + stack configs (fatal before any write)
3) Ask the remaining questions (or take them from an answers file / defaults)
4) Materialize the declared template files into the destination
5) Install dependencies, set up the deploy site, init git and publish to GitHub
   (best-effort: failures are reported, later steps still run)

This module should orchestrate behavior but keep concerns isolated:
- Stacks/config: `stacks.py`
- Rendering: `materializer.py`
- Prompts: `prompts.py`
- External tools: `installer.py`, `repository.py`, `deploy.py`
"""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from rich.console import Console

from appgen import __version__
from appgen.answers import AnswersError, load_answers
from appgen.deploy import deploy_command, deploy_url, host_name, site_commands
from appgen.environment import Capabilities, CapabilityError, default_deploy_tool, detect_capabilities
from appgen.installer import install, package_manager
from appgen.materializer import MaterializeError, materialize
from appgen.naming import determine_appname, kebab_case, start_case
from appgen.prompts import DefaultsPrompter, Prompter, RichPrompter, ask, build_questions, stack_question
from appgen.repository import init_repository, publish_repository
from appgen.shell import StepReport, run_steps
from appgen.stacks import ResolvedStack, StackConfigError, UnknownStackError, load_registry, resolve_stack

logger = logging.getLogger(__name__)

DEFAULT_RESOURCES_DIR = Path(__file__).resolve().parent / "resources"

EXIT_OK = 0
EXIT_STEP_FAILED = 1
EXIT_ERROR = 2


class CLIError(RuntimeError):
    pass


@dataclass(frozen=True)
class ProjectProps:
    """Answers for one run. Built once after prompting, read by every later step."""

    appname: str
    title: str
    stack: str
    repo: bool
    use_yarn: bool
    deploy_tool: str | None
    github_owner: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "appname": self.appname,
            "title": self.title,
            "stack": self.stack,
            "repo": self.repo,
            "use_yarn": self.use_yarn,
            "deploy_tool": self.deploy_tool,
            "github_owner": self.github_owner,
        }


def _select_stack(
    requested: str | None,
    registry: Mapping[str, str],
    prompter: Prompter,
    *,
    interactive: bool,
    console: Console,
) -> str:
    """
    Use the requested stack when it is known. An unknown stack is reported together
    with the supported ones; interactively the user is asked again, otherwise it is fatal.
    """
    if requested:
        if requested in registry:
            console.print(f"Using [bold yellow]{requested.upper()}[/bold yellow]: {registry[requested]}")
            return requested
        error = UnknownStackError(requested, list(registry))
        if not interactive:
            raise error
        console.print(f"[bold red]{error}[/bold red]")
    return str(ask([stack_question(registry)], prompter)["stack"])


def _build_props(
    destination: Path,
    stack_id: str,
    answers: Mapping[str, Any],
    caps: Capabilities,
    github_owner: str | None,
) -> ProjectProps:
    appname = determine_appname(destination)
    return ProjectProps(
        appname=appname,
        title=str(answers.get("title") or start_case(appname)),
        stack=stack_id,
        repo=bool(answers.get("repo", False)),
        use_yarn=bool(answers.get("use_yarn", False)),
        deploy_tool=answers.get("deploy_tool") or default_deploy_tool(caps),
        github_owner=github_owner,
    )


def _build_context(props: ProjectProps, resolved: ResolvedStack, caps: Capabilities) -> dict[str, Any]:
    # names available inside every template
    host = host_name(props.appname, caps.username)
    return {
        "props": props.as_dict(),
        **props.as_dict(),  # {{ title }} as well as {{ props.title }}
        "slug": kebab_case(props.appname),
        "stack_label": resolved.label,
        "package_manager": package_manager(props.use_yarn),
        "host_name": host,
        "deploy_url": deploy_url(host),
        "deploy_dir": resolved.deploy_dir,
        "deploy_command": deploy_command(props.deploy_tool, resolved.deploy_dir),
        "dependencies": list(resolved.dependencies),
        "dev_dependencies": list(resolved.dev_dependencies),
    }


def _print_success(console: Console, props: ProjectProps, destination: Path) -> None:
    console.print()
    console.print(f'Success! Created "{props.title}"')
    console.print()
    console.print("We suggest that you begin by typing:")
    console.print()
    console.print(f"  [cyan]cd[/cyan] {destination.name}")
    console.print(f"  [cyan]{package_manager(props.use_yarn)} start[/cyan]")
    console.print()


def generate_cmd(args: argparse.Namespace, *, console: Console | None = None, prompter: Prompter | None = None) -> int:
    console = console or Console()
    interactive = not bool(args.yes)
    if prompter is None:
        prompter = RichPrompter(console) if interactive else DefaultsPrompter()

    destination = Path(args.name or ".").resolve()
    if destination.exists() and not destination.is_dir():
        raise CLIError(f"Destination is not a directory: {destination}")
    resources = Path(args.resources_dir).resolve()
    config_root = resources / "config"
    template_root = resources / "templates"

    preset = load_answers(args.answers) if args.answers else {}
    caps = detect_capabilities(destination)
    logger.debug("Capabilities: %s", caps)

    registry = load_registry(config_root)
    stack_id = _select_stack(
        args.stack or preset.get("stack"),
        registry,
        prompter,
        interactive=interactive,
        console=console,
    )
    resolved = resolve_stack(stack_id, config_root, registry)

    answers = ask(build_questions(destination, caps), prompter, preset)
    if answers.get("empty"):
        console.print("Whew... [green]that was a close one.[/green] Bye!")
        return EXIT_OK

    github_owner = args.github_owner or preset.get("github_owner")
    props = _build_props(destination, stack_id, answers, caps, github_owner)
    context = _build_context(props, resolved, caps)

    result = materialize(
        install_files=resolved.install_files,
        template_root=template_root,
        destination_root=destination,
        context=context,
    )
    logger.info(
        "Wrote %d files into %s (%d rendered, %d copied)",
        len(result.written),
        destination,
        result.rendered_files,
        result.copied_files,
    )

    report = StepReport()

    if args.skip_install:
        logger.info("Skipping dependency installation")
    else:
        install(
            destination=destination,
            use_yarn=props.use_yarn,
            dependencies=resolved.dependencies,
            dev_dependencies=resolved.dev_dependencies,
            report=report,
        )

    site = site_commands(props.deploy_tool, context["host_name"])
    if site:
        run_steps(site, cwd=destination, report=report)

    if props.repo and init_repository(destination, report=report):
        publish_repository(
            destination,
            name=context["slug"],
            description=props.title,
            homepage=context["deploy_url"],
            token=args.github_token or os.environ.get("GITHUB_TOKEN"),
            owner=props.github_owner,
            private=bool(args.private),
            report=report,
        )

    _print_success(console, props, destination)

    if not report.ok:
        console.print(f"[bold red]{len(report.failures)} step(s) failed; see the messages above.[/bold red]")
        return EXIT_STEP_FAILED
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="appgen", description="appgen - scaffold a new project from a stack template")
    p.add_argument("stack", nargs="?", default=None, help="Stack identifier (prompted for when omitted)")
    p.add_argument("--name", default=None, help="Destination directory (default: current directory)")
    p.add_argument(
        "--resources-dir",
        default=str(DEFAULT_RESOURCES_DIR),
        help="Directory holding config/ and templates/ (default: bundled stacks)",
    )
    p.add_argument("--answers", default=None, help="YAML file with preset answers")
    p.add_argument("-y", "--yes", action="store_true", help="Do not prompt; use preset answers and defaults")
    p.add_argument("--skip-install", action="store_true", help="Do not install dependencies")

    p.add_argument("--github-owner", default=None, help="GitHub owner for the new repo (default: the token's user)")
    p.add_argument("--github-token", default=None, help="GitHub token (or set env GITHUB_TOKEN)")
    p.add_argument("--private", action="store_true", help="Create a private GitHub repo")

    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )
    try:
        return int(generate_cmd(args))
    except (StackConfigError, MaterializeError, AnswersError, CapabilityError, CLIError) as e:
        logger.error("%s", e)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
