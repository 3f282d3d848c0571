"""Unit tests for the template materializer (appgen.materializer).

Tests cover:
- Binary sniffing (NUL bytes, control-byte ratio, invalid UTF-8, plain text)
- Byte-for-byte copies of binary sources
- Rendering of text templates, exact copies of marker-free text
- Idempotent rendering
- Destination collisions (later pair wins)
- Failures: missing source, undefined variable, escaping destination; none of them write
"""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from appgen.materializer import MaterializeError, is_binary, materialize
from tests.conftest import PNG_BYTES


def _files(root: Path) -> list[Path]:
    if not root.exists():
        return []
    return sorted(p for p in root.rglob("*") if p.is_file())


# ---------------------------------------------------------------------------
# is_binary
# ---------------------------------------------------------------------------


class TestIsBinary:
    def test_nul_byte_is_binary(self):
        assert is_binary(b"abc\x00def") is True

    def test_png_header_is_binary(self):
        assert is_binary(PNG_BYTES) is True

    def test_plain_text_is_not_binary(self):
        assert is_binary(b"hello\nworld\t!\r\n") is False

    def test_utf8_text_is_not_binary(self):
        assert is_binary("héllo wörld ✓\n".encode("utf-8")) is False

    def test_invalid_utf8_is_binary(self):
        assert is_binary(b"caf\xe9 au lait") is True

    def test_many_control_bytes_is_binary(self):
        assert is_binary(b"\x01\x02\x03\x04abcdef") is True

    def test_empty_is_text(self):
        assert is_binary(b"") is False

    def test_deterministic(self):
        data = os.urandom(64) + b"text"
        assert is_binary(data) == is_binary(data)


# ---------------------------------------------------------------------------
# materialize
# ---------------------------------------------------------------------------


class TestMaterialize:
    def test_binary_copied_byte_for_byte(self, template_root: Path, tmp_path: Path):
        dest = tmp_path / "out"
        materialize(
            install_files=[("common/logo.png", "assets/logo.png")],
            template_root=template_root,
            destination_root=dest,
            context={},
        )
        assert (dest / "assets" / "logo.png").read_bytes() == PNG_BYTES

    def test_binary_with_template_markers_is_not_rendered(self, tmp_path: Path):
        tpl = tmp_path / "tpl"
        tpl.mkdir()
        data = b"\x00\x01{{ title }}\x02\xff"
        (tpl / "blob.bin").write_bytes(data)
        dest = tmp_path / "out"

        result = materialize(
            install_files=[("blob.bin", "blob.bin")],
            template_root=tpl,
            destination_root=dest,
            context={},
        )
        assert (dest / "blob.bin").read_bytes() == data
        assert result.copied_files == 1
        assert result.rendered_files == 0

    def test_text_rendered_with_context(self, template_root: Path, tmp_path: Path):
        dest = tmp_path / "out"
        result = materialize(
            install_files=[("common/README.md", "README.md"), ("common/gitignore", ".gitignore")],
            template_root=template_root,
            destination_root=dest,
            context={"title": "My App"},
        )
        assert (dest / "README.md").read_text(encoding="utf-8") == "# My App\n\ncommon readme\n"
        assert (dest / ".gitignore").read_text(encoding="utf-8") == "node_modules\n"
        assert result.rendered_files == 1
        assert result.copied_files == 1
        assert result.written == ((dest / "README.md").resolve(), (dest / ".gitignore").resolve())

    def test_marker_free_text_keeps_line_endings(self, tmp_path: Path):
        tpl = tmp_path / "tpl"
        tpl.mkdir()
        (tpl / "win.txt").write_bytes(b"one\r\ntwo\r\n")
        dest = tmp_path / "out"
        materialize(install_files=[("win.txt", "win.txt")], template_root=tpl, destination_root=dest, context={})
        assert (dest / "win.txt").read_bytes() == b"one\r\ntwo\r\n"

    def test_rendering_is_idempotent(self, template_root: Path, tmp_path: Path):
        context = {"title": "Same"}
        first, second = tmp_path / "a", tmp_path / "b"
        for dest in (first, second):
            materialize(
                install_files=[("common/README.md", "README.md"), ("alpha/index.html", "index.html")],
                template_root=template_root,
                destination_root=dest,
                context=context,
            )
        for name in ("README.md", "index.html"):
            assert (first / name).read_bytes() == (second / name).read_bytes()

    def test_later_pair_wins_on_collision(self, template_root: Path, tmp_path: Path):
        dest = tmp_path / "out"
        result = materialize(
            install_files=[("common/README.md", "README.md"), ("alpha/README.md", "README.md")],
            template_root=template_root,
            destination_root=dest,
            context={"title": "X"},
        )
        assert (dest / "README.md").read_text(encoding="utf-8") == "# X (alpha)\n"
        assert len(result.written) == 1

    def test_creates_intermediate_directories(self, template_root: Path, tmp_path: Path):
        dest = tmp_path / "out"
        materialize(
            install_files=[("common/gitignore", "a/b/c/.gitignore")],
            template_root=template_root,
            destination_root=dest,
            context={},
        )
        assert (dest / "a" / "b" / "c" / ".gitignore").is_file()

    def test_overwrites_existing_file(self, template_root: Path, tmp_path: Path):
        dest = tmp_path / "out"
        dest.mkdir()
        (dest / ".gitignore").write_text("old\n", encoding="utf-8")
        materialize(
            install_files=[("common/gitignore", ".gitignore")],
            template_root=template_root,
            destination_root=dest,
            context={},
        )
        assert (dest / ".gitignore").read_text(encoding="utf-8") == "node_modules\n"

    def test_empty_pair_list_creates_destination(self, template_root: Path, tmp_path: Path):
        dest = tmp_path / "out"
        result = materialize(install_files=[], template_root=template_root, destination_root=dest, context={})
        assert dest.is_dir()
        assert result.written == ()


class TestMaterializeFailures:
    def test_missing_source_names_it_and_writes_nothing(self, template_root: Path, tmp_path: Path):
        dest = tmp_path / "out"
        with pytest.raises(MaterializeError, match="nope.txt") as excinfo:
            materialize(
                install_files=[("common/gitignore", ".gitignore"), ("common/nope.txt", "nope.txt")],
                template_root=template_root,
                destination_root=dest,
                context={},
            )
        assert excinfo.value.source == "common/nope.txt"
        assert _files(dest) == []

    def test_undefined_variable_names_source_and_writes_nothing(self, template_root: Path, tmp_path: Path):
        dest = tmp_path / "out"
        with pytest.raises(MaterializeError, match="alpha/index.html") as excinfo:
            materialize(
                install_files=[("common/gitignore", ".gitignore"), ("alpha/index.html", "index.html")],
                template_root=template_root,
                destination_root=dest,
                context={},
            )
        assert excinfo.value.source == "alpha/index.html"
        assert _files(dest) == []

    def test_destination_outside_root_is_rejected(self, template_root: Path, tmp_path: Path):
        dest = tmp_path / "out"
        with pytest.raises(MaterializeError, match="escapes"):
            materialize(
                install_files=[("common/gitignore", "../escaped")],
                template_root=template_root,
                destination_root=dest,
                context={},
            )
        assert not (tmp_path / "escaped").exists()

    def test_missing_template_root(self, tmp_path: Path):
        with pytest.raises(MaterializeError, match="Template directory not found"):
            materialize(
                install_files=[],
                template_root=tmp_path / "missing",
                destination_root=tmp_path / "out",
                context={},
            )

    def test_unwritable_destination_reports_path(self, template_root: Path, tmp_path: Path):
        dest = tmp_path / "out"
        dest.mkdir()
        # a file where a directory is needed
        (dest / "assets").write_text("not a dir", encoding="utf-8")
        with pytest.raises(MaterializeError, match="common/logo.png"):
            materialize(
                install_files=[("common/logo.png", "assets/logo.png")],
                template_root=template_root,
                destination_root=dest,
                context={},
            )


class TestReadOnlySources:
    @pytest.fixture
    def read_only_tpl(self, tmp_path: Path) -> Path:
        tpl = tmp_path / "tpl"
        tpl.mkdir()
        (tpl / "a.txt").write_text("first\n", encoding="utf-8")
        (tpl / "b.txt").write_text("second\n", encoding="utf-8")
        (tpl / "a.txt").chmod(0o444)
        yield tpl
        (tpl / "a.txt").chmod(0o644)

    def test_collision_after_read_only_source(self, read_only_tpl: Path, tmp_path: Path):
        dest = tmp_path / "out"
        materialize(
            install_files=[("a.txt", "x.txt"), ("b.txt", "x.txt")],
            template_root=read_only_tpl,
            destination_root=dest,
            context={},
        )
        assert (dest / "x.txt").read_text(encoding="utf-8") == "second\n"

    def test_rerun_over_read_only_copy(self, read_only_tpl: Path, tmp_path: Path):
        dest = tmp_path / "out"
        for _ in range(2):
            materialize(
                install_files=[("a.txt", "x.txt")],
                template_root=read_only_tpl,
                destination_root=dest,
                context={},
            )
        mode = stat.S_IMODE((dest / "x.txt").stat().st_mode)
        assert mode & stat.S_IWUSR
        assert mode & 0o044 == 0o044

    def test_existing_read_only_destination_is_overwritten(self, template_root: Path, tmp_path: Path):
        dest = tmp_path / "out"
        dest.mkdir()
        target = dest / ".gitignore"
        target.write_text("old\n", encoding="utf-8")
        target.chmod(0o444)
        materialize(
            install_files=[("common/gitignore", ".gitignore")],
            template_root=template_root,
            destination_root=dest,
            context={},
        )
        assert target.read_text(encoding="utf-8") == "node_modules\n"
