"""
materializer.py

Responsibility: Turn declared (template path -> destination path) pairs into files on disk.

Rules:
- Pairs are processed in declaration order; when two pairs target the same destination,
  the later one wins.
- Binary sources are copied byte-for-byte.
- UTF-8 text sources containing Jinja2 markers are rendered with the provided context;
  other text is copied exactly as authored.
- Every source is read and every template rendered before the first write, so a missing
  source or an undefined template variable leaves the destination untouched.

This module intentionally does NOT know about prompts, stacks, git, or package managers.
"""

from __future__ import annotations

import logging
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from jinja2 import Environment, StrictUndefined, TemplateError

logger = logging.getLogger(__name__)

SNIFF_BYTES = 8000
_TEXT_CONTROL = {0x07, 0x08, 0x09, 0x0A, 0x0C, 0x0D, 0x1B}
_TEMPLATE_MARKERS = ("{{", "{%", "{#")


class MaterializeError(RuntimeError):
    def __init__(self, message: str, *, source: str) -> None:
        self.source = source
        super().__init__(message)


@dataclass(frozen=True)
class MaterializeResult:
    rendered_files: int
    copied_files: int
    written: tuple[Path, ...]


@dataclass(frozen=True)
class _Planned:
    source: str
    dest_path: Path
    src_path: Path
    content: bytes
    rendered: bool


def is_binary(data: bytes) -> bool:
    """
    Sniff the first SNIFF_BYTES bytes of `data`.

    Binary if the prefix contains a NUL byte, if more than 10% of it is non-text
    control bytes, or if the whole content is not valid UTF-8.
    """
    prefix = data[:SNIFF_BYTES]
    if not prefix:
        return False
    if b"\x00" in prefix:
        return True
    suspicious = sum(1 for b in prefix if (b < 0x20 and b not in _TEXT_CONTROL) or b == 0x7F)
    if suspicious * 10 > len(prefix):
        return True
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return True
    return False


def _environment() -> Environment:
    return Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def _destination(dst_root: Path, dest: str, source: str) -> Path:
    dest_path = (dst_root / dest).resolve()
    if dest_path != dst_root and dst_root not in dest_path.parents:
        raise MaterializeError(f"Destination escapes the project directory: {dest} (from {source})", source=source)
    return dest_path


def _plan(
    pairs: Iterable[tuple[str, str]],
    tpl_root: Path,
    dst_root: Path,
    context: dict[str, Any],
) -> list[_Planned]:
    env = _environment()
    planned: list[_Planned] = []

    for source, dest in pairs:
        src_path = tpl_root / source
        if not src_path.is_file():
            raise MaterializeError(f"Template file not found: {source} ({src_path})", source=source)
        try:
            data = src_path.read_bytes()
        except OSError as e:
            raise MaterializeError(f"Template file is not readable: {source} ({e})", source=source) from e

        dest_path = _destination(dst_root, dest, source)

        if is_binary(data):
            planned.append(_Planned(source, dest_path, src_path, data, rendered=False))
            continue

        text = data.decode("utf-8")
        if not any(marker in text for marker in _TEMPLATE_MARKERS):
            # no markers: copy as-is, line endings included
            planned.append(_Planned(source, dest_path, src_path, data, rendered=False))
            continue

        try:
            out = env.from_string(text).render(**context)
        except TemplateError as e:
            raise MaterializeError(f"Failed rendering template file: {source}: {e}", source=source) from e
        planned.append(_Planned(source, dest_path, src_path, out.encode("utf-8"), rendered=True))

    return planned


def materialize(
    *,
    install_files: Iterable[tuple[str, str]],
    template_root: str | Path,
    destination_root: str | Path,
    context: dict[str, Any],
) -> MaterializeResult:
    """
    Render/copy every declared pair from template_root into destination_root.

    - Creates destination directories as needed.
    - Copies file permissions from template files, always leaving the owner write bit set.
    - Raises MaterializeError naming the offending source on any failure.
    """
    tpl_root = Path(template_root).resolve()
    dst_root = Path(destination_root).resolve()

    if not tpl_root.is_dir():
        raise MaterializeError(f"Template directory not found: {tpl_root}", source=str(tpl_root))

    planned = _plan(install_files, tpl_root, dst_root, context)
    try:
        dst_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise MaterializeError(f"Cannot create destination {dst_root}: {e}", source=str(tpl_root)) from e

    rendered = 0
    copied = 0
    written: list[Path] = []
    seen: dict[Path, str] = {}

    for item in planned:
        if item.dest_path in seen:
            logger.info("%s overrides %s at %s", item.source, seen[item.dest_path], item.dest_path)
        seen[item.dest_path] = item.source

        try:
            item.dest_path.parent.mkdir(parents=True, exist_ok=True)
            if item.dest_path.exists():
                item.dest_path.chmod(item.dest_path.stat().st_mode | stat.S_IWUSR)
            item.dest_path.write_bytes(item.content)
            # owner keeps write access
            item.dest_path.chmod(stat.S_IMODE(item.src_path.stat().st_mode) | stat.S_IWUSR)
        except OSError as e:
            raise MaterializeError(
                f"Failed writing {item.dest_path} (from {item.source}): {e}",
                source=item.source,
            ) from e

        logger.debug("%s %s -> %s", "rendered" if item.rendered else "copied", item.source, item.dest_path)
        if item.rendered:
            rendered += 1
        else:
            copied += 1
        if item.dest_path not in written:
            written.append(item.dest_path)

    return MaterializeResult(rendered_files=rendered, copied_files=copied, written=tuple(written))
