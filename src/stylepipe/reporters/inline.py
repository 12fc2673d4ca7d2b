from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console

from stylepipe.engine.types import DiagnosticResult


def render_inline(results: Sequence[DiagnosticResult]) -> str:
    lines: list[str] = []
    for result in results:
        for v in result.violations:
            lines.append(f"{result.filename}: line {v.line}, col {v.column}, {v.message}")
    return "\n".join(lines)


def report_inline(results: Sequence[DiagnosticResult], *, console: Console) -> None:
    text = render_inline(results)
    if text:
        console.print(text, markup=False, highlight=False, soft_wrap=True)
