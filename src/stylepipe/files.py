from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace
from pathlib import Path

from stylepipe.engine.types import DiagnosticResult
from stylepipe.utils import safe_relpath

DEFAULT_SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".idea",
    ".vscode",
    "node_modules",
    "bower_components",
    "dist",
    "build",
    "coverage",
}
SOURCE_EXTENSIONS = frozenset({".js", ".jsx", ".mjs", ".cjs"})


class FileReadError(RuntimeError):
    """Raised when a file's contents cannot be read or decoded for checking."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot check {path}: {reason}")
        self.path = path


@dataclass(frozen=True, slots=True)
class SourceFile:
    """
    A unit of content flowing through the pipeline.

    `contents` is None for null entries (e.g. directories), which stages pass
    through untouched. `base` anchors `relative`; it defaults to the working
    directory.
    """

    path: Path
    contents: bytes | None = None
    base: Path | None = None

    @property
    def relative(self) -> str:
        return safe_relpath(self.path, self.base if self.base is not None else Path.cwd())

    def is_null(self) -> bool:
        return self.contents is None

    def with_contents(self, contents: bytes) -> SourceFile:
        return replace(self, contents=contents)


@dataclass(frozen=True, slots=True)
class CheckedFile:
    """A source file paired with the diagnostics attached by the check stage."""

    file: SourceFile
    result: DiagnosticResult | None = None

    @property
    def path(self) -> Path:
        return self.file.path

    @property
    def success(self) -> bool:
        return self.result is None or self.result.success


def read_source_file(path: Path, *, base: Path | None = None) -> SourceFile:
    try:
        contents = path.read_bytes()
    except OSError as exc:
        raise FileReadError(path, exc.strerror or str(exc)) from exc
    return SourceFile(path=path, contents=contents, base=base)


def iter_source_files(paths: Iterable[Path], *, base: Path | None = None) -> Iterator[SourceFile]:
    for path in paths:
        yield read_source_file(path, base=base)


def discover_files(paths: Iterable[Path]) -> list[Path]:
    """
    Expand files and directories into a sorted list of JavaScript sources.

    Explicitly named files are kept regardless of extension; directories are
    walked, skipping VCS, editor and dependency folders.
    """

    files: list[Path] = []
    for scan_path in paths:
        if scan_path.is_file():
            files.append(scan_path)
            continue

        for dirpath, dirnames, filenames in os.walk(scan_path, topdown=True):
            dirnames[:] = [d for d in dirnames if d not in DEFAULT_SKIP_DIRS]
            base = Path(dirpath)
            for filename in filenames:
                path = base / filename
                if path.suffix.lower() in SOURCE_EXTENSIONS:
                    files.append(path)

    return sorted(set(files))
