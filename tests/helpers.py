from __future__ import annotations

from pathlib import Path

from stylepipe.config import StyleConfig, resolve_config
from stylepipe.engine.context import FileContext, build_file_context
from stylepipe.files import SourceFile


def make_source(base: Path, relpath: str, content: str | None) -> SourceFile:
    return SourceFile(
        path=base / relpath,
        contents=None if content is None else content.encode("utf-8"),
        base=base,
    )


def make_config(tmp_path: Path, **options) -> StyleConfig:
    return resolve_config(options, cwd=tmp_path)


def make_ctx(text: str, *, esnext: bool = False) -> FileContext:
    return build_file_context("fixture.js", text, esnext=esnext)
