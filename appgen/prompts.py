"""
prompts.py

Responsibility: Describe the interactive questions as data and ask them through a pluggable prompter.

A `Question` is asked only when its `when` predicate holds for the answers collected so
far. Preset answers (CLI flags, an answers file) short-circuit the prompt entirely.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Protocol

from rich.console import Console
from rich.prompt import Confirm, Prompt

from appgen.environment import GH_PAGES, NETLIFY, Capabilities
from appgen.naming import determine_appname, start_case

Answers = Mapping[str, Any]

CONFIRM = "confirm"
INPUT = "input"
LIST = "list"


@dataclass(frozen=True)
class Choice:
    value: str
    label: str


@dataclass(frozen=True)
class Question:
    name: str
    message: str
    kind: str = INPUT
    default: Any = None
    choices: tuple[Choice, ...] = ()
    when: Callable[[Answers], bool] | None = None

    def resolve_default(self, answers: Answers) -> Any:
        return self.default(answers) if callable(self.default) else self.default

    def applies(self, answers: Answers) -> bool:
        return self.when is None or bool(self.when(answers))


class Prompter(Protocol):
    def confirm(self, message: str, default: bool) -> bool: ...

    def text(self, message: str, default: str) -> str: ...

    def choose(self, message: str, choices: tuple[Choice, ...], default: str | None) -> str: ...


class RichPrompter:
    """Terminal prompts backed by rich.prompt."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def confirm(self, message: str, default: bool) -> bool:
        return Confirm.ask(message, default=default, console=self.console)

    def text(self, message: str, default: str) -> str:
        return Prompt.ask(message, default=default, console=self.console)

    def choose(self, message: str, choices: tuple[Choice, ...], default: str | None) -> str:
        for choice in choices:
            self.console.print(f"  [cyan]{choice.value}[/cyan]  {choice.label}")
        return Prompt.ask(
            message,
            choices=[c.value for c in choices],
            default=default,
            console=self.console,
        )


class DefaultsPrompter:
    """Non-interactive prompter: every question takes its default."""

    def confirm(self, message: str, default: bool) -> bool:
        return bool(default)

    def text(self, message: str, default: str) -> str:
        return default

    def choose(self, message: str, choices: tuple[Choice, ...], default: str | None) -> str:
        if default is None:
            return choices[0].value
        return default


def ask(
    questions: list[Question],
    prompter: Prompter,
    preset: Answers | None = None,
) -> dict[str, Any]:
    """Ask `questions` in order and return the collected answers."""
    answers: dict[str, Any] = {}
    preset = preset or {}
    for q in questions:
        if q.name in preset:
            answers[q.name] = preset[q.name]
            continue
        if not q.applies(answers):
            continue
        default = q.resolve_default(answers)
        if q.kind == CONFIRM:
            answers[q.name] = prompter.confirm(q.message, bool(default))
        elif q.kind == LIST:
            answers[q.name] = prompter.choose(q.message, q.choices, default)
        else:
            answers[q.name] = prompter.text(q.message, "" if default is None else str(default))
    return answers


def is_empty_dir(path: str | Path) -> bool:
    """Missing directories count as empty."""
    p = Path(path)
    if not p.exists():
        return True
    return p.is_dir() and not any(p.iterdir())


def bail_question(destination: str | Path) -> Question:
    """
    Offer to stop when the destination already has content.

    The question is only asked for a non-empty destination, where it defaults to
    bailing out; for an empty destination it is skipped and the flow proceeds.
    """
    dest = Path(destination)
    empty = is_empty_dir(dest)
    return Question(
        name="empty",
        message=f"This directory ({dest.resolve()}) is not empty. Should we bail?",
        kind=CONFIRM,
        default=not empty,
        when=lambda _answers: not empty,
    )


def _proceeding(answers: Answers) -> bool:
    return not answers.get("empty")


def build_questions(destination: str | Path, caps: Capabilities) -> list[Question]:
    """Questions asked after the stack is chosen, in the order they are asked."""
    appname = determine_appname(destination)
    questions = [
        bail_question(destination),
        Question(
            name="title",
            message="What's your project's title?",
            default=start_case(appname),
            when=_proceeding,
        ),
        Question(
            name="repo",
            message="Create GitHub repository?",
            kind=CONFIRM,
            default=not caps.in_git_repo,
            when=_proceeding,
        ),
    ]

    if caps.has_yarn:
        questions.append(
            Question(
                name="use_yarn",
                message="Use yarn instead of npm?",
                kind=CONFIRM,
                default=True,
                when=_proceeding,
            )
        )

    if caps.has_netlify and caps.has_gh_pages:
        questions.append(
            Question(
                name="deploy_tool",
                message="Which deployment tool?",
                kind=LIST,
                default=NETLIFY,
                choices=(Choice(NETLIFY, "Netlify"), Choice(GH_PAGES, "GitHub Pages")),
                when=_proceeding,
            )
        )

    return questions


def stack_question(registry: Mapping[str, str], default: str = "alpha") -> Question:
    return Question(
        name="stack",
        message="Which stack?",
        kind=LIST,
        default=default if default in registry else next(iter(registry)),
        choices=tuple(Choice(value, label) for value, label in registry.items()),
    )
