from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.text import Text

from stylepipe.engine.types import DiagnosticResult


def report_console(results: Sequence[DiagnosticResult], *, console: Console) -> None:
    """
    Print every violation with a source excerpt, grouped per file, followed
    by a total. Prints nothing when all files pass.
    """

    total = 0
    for result in results:
        if result.success:
            continue
        console.print(Text(result.filename, style="bold"))
        for violation in result.violations:
            console.print(Text(result.explain_error(violation, verbose=True)), soft_wrap=True)
            console.print()
        total += len(result.violations)

    if total:
        noun = "error" if total == 1 else "errors"
        console.print(Text(f"{total} code style {noun} found.", style="bold red"))
