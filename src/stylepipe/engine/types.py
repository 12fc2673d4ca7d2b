from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

_CONTEXT_LINES = 2
_GUTTER_WIDTH = 6


@dataclass(frozen=True, slots=True)
class Violation:
    rule: str
    message: str
    line: int  # 1-based
    column: int  # 0-based
    fixed: bool = False


@dataclass(frozen=True, slots=True)
class DiagnosticResult:
    """
    Style-check outcome for a single file.

    `violations` keep the order in which they occur in the source. The result
    carries the checked source text so explanations can quote it.
    """

    filename: str
    violations: tuple[Violation, ...] = ()
    source: str = field(default="", repr=False)

    @property
    def success(self) -> bool:
        return not self.violations

    def get_error_list(self) -> list[Violation]:
        return list(self.violations)

    def explain_error(self, violation: Violation, verbose: bool = False) -> str:
        """
        Render `violation` as a message naming the file.

        With `verbose`, append the surrounding source lines and a caret
        pointing at the violation column:

             1 |var x = 1,y = 2;
            --------^
        """

        if not verbose:
            return f"{violation.message} at {self.filename} (line {violation.line}, col {violation.column})"

        # Same line split as the checker, so excerpt numbers match violation lines.
        lines = [line[:-1] if line.endswith("\r") else line for line in self.source.split("\n")]
        if len(lines) > 1 and lines[-1] == "":
            lines.pop()
        first = max(violation.line - _CONTEXT_LINES, 1)
        last = min(violation.line + _CONTEXT_LINES, len(lines))
        out = [f"{violation.message} at {self.filename} :"]
        for number in range(first, last + 1):
            out.append(f"{number:>{_GUTTER_WIDTH}} |{lines[number - 1]}")
            if number == violation.line:
                out.append("-" * (_GUTTER_WIDTH + 2 + violation.column) + "^")
        if violation.line > len(lines):
            out.append("-" * (_GUTTER_WIDTH + 2 + violation.column) + "^")
        return "\n".join(out)


@dataclass(frozen=True, slots=True)
class FixOutcome:
    output: str
    result: DiagnosticResult
    fixed: tuple[Violation, ...] = ()
    passes: int = 0


class CheckEngine(Protocol):
    """The per-file style checking collaborator driven by the pipeline."""

    def check(self, text: str, *, filename: str) -> DiagnosticResult: ...

    def fix(self, text: str, *, filename: str) -> FixOutcome: ...
