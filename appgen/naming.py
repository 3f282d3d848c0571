"""
naming.py

Responsibility: Small, pure helpers that turn directory names into project names.

Word splitting follows the usual camelCase / separator / digit boundaries so that
`myCoolApp`, `my-cool-app` and `my cool app` all produce the same words.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")
_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+")
_PUNCTUATION = re.compile(r"[^\w\s]+?")


def words(value: str) -> list[str]:
    out: list[str] = []
    for chunk in _SEPARATORS.split(value):
        out.extend(_WORD.findall(chunk))
    return out


def start_case(value: str) -> str:
    """`my-cool_app` -> `My Cool App`. Only the first letter of each word is touched."""
    return " ".join(w[:1].upper() + w[1:] for w in words(value))


def kebab_case(value: str) -> str:
    """`My Cool App` -> `my-cool-app`."""
    return "-".join(w.lower() for w in words(value))


def determine_appname(destination: str | Path) -> str:
    """
    Name of the project being generated.

    Prefers the `name` of an existing package.json in the destination, otherwise the
    destination directory name. Punctuation is replaced by spaces.
    """
    dest = Path(destination)
    name = ""
    package_json = dest / "package.json"
    if package_json.is_file():
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            data = {}
        if isinstance(data, dict):
            name = str(data.get("name") or "")
    if not name:
        name = dest.resolve().name
    return _PUNCTUATION.sub(" ", name)
