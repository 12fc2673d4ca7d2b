from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass

from stylepipe.engine.lexer import ScannedSource, StringToken, scan_source
from stylepipe.suppressions import Suppressions, parse_suppressions


@dataclass(frozen=True, slots=True)
class FileContext:
    filename: str
    text: str
    lines: tuple[str, ...]
    line_starts: tuple[int, ...]
    scanned: ScannedSource
    suppressions: Suppressions
    esnext: bool = False

    @property
    def code(self) -> str:
        return self.scanned.code

    def position(self, offset: int) -> tuple[int, int]:
        """Map a text offset to (1-based line, 0-based column)."""

        idx = bisect_right(self.line_starts, offset) - 1
        return idx + 1, offset - self.line_starts[idx]

    def offset(self, line: int, column: int) -> int:
        return self.line_starts[line - 1] + column

    def string_at(self, offset: int) -> StringToken | None:
        for token in self.scanned.strings:
            if token.start == offset:
                return token
        return None


def build_file_context(filename: str, text: str, *, esnext: bool = False) -> FileContext:
    raw_lines = text.split("\n")
    lines = tuple(line[:-1] if line.endswith("\r") else line for line in raw_lines)

    starts = [0]
    for line in raw_lines[:-1]:
        starts.append(starts[-1] + len(line) + 1)

    return FileContext(
        filename=filename,
        text=text,
        lines=lines,
        line_starts=tuple(starts),
        scanned=scan_source(text),
        suppressions=parse_suppressions(lines),
        esnext=esnext,
    )
