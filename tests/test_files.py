from __future__ import annotations

from pathlib import Path

import pytest

from stylepipe.files import FileReadError, SourceFile, discover_files, iter_source_files, read_source_file


def test_discover_files_walks_directories_and_keeps_explicit_files(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "a.js").write_text("", encoding="utf-8")
    (tmp_path / "src" / "b.mjs").write_text("", encoding="utf-8")
    (tmp_path / "src" / "c.py").write_text("", encoding="utf-8")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "hook.js").write_text("", encoding="utf-8")
    explicit = tmp_path / "build.config"
    explicit.write_text("", encoding="utf-8")

    found = discover_files([tmp_path, explicit])

    assert found == sorted([tmp_path / "src" / "a.js", tmp_path / "src" / "b.mjs", explicit])


def test_source_file_relative_uses_base(tmp_path: Path) -> None:
    source = SourceFile(path=tmp_path / "lib" / "a.js", contents=b"", base=tmp_path)
    assert source.relative == "lib/a.js"
    assert not source.is_null()
    assert SourceFile(path=tmp_path).is_null()


def test_with_contents_returns_a_new_file(tmp_path: Path) -> None:
    source = SourceFile(path=tmp_path / "a.js", contents=b"x", base=tmp_path)
    updated = source.with_contents(b"y")
    assert source.contents == b"x"
    assert updated.contents == b"y"
    assert updated.base == tmp_path


def test_read_source_file_wraps_os_errors(tmp_path: Path) -> None:
    with pytest.raises(FileReadError) as excinfo:
        read_source_file(tmp_path / "missing.js")
    assert excinfo.value.path == tmp_path / "missing.js"


def test_iter_source_files_is_lazy(tmp_path: Path) -> None:
    path = tmp_path / "a.js"
    path.write_text("var a;\n", encoding="utf-8")
    stream = iter_source_files([path, tmp_path / "missing.js"], base=tmp_path)

    assert next(stream).contents == b"var a;\n"
    with pytest.raises(FileReadError):
        next(stream)
