from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console

from stylepipe.engine.types import DiagnosticResult


def render_github_annotations(results: Sequence[DiagnosticResult]) -> str:
    lines: list[str] = []
    for result in results:
        for v in result.violations:
            # GitHub columns are 1-based.
            lines.append(f"::error file={result.filename},line={v.line},col={v.column + 1}::{v.rule} {v.message}")
    return "\n".join(lines)


def report_github(results: Sequence[DiagnosticResult], *, console: Console) -> None:
    text = render_github_annotations(results)
    if text:
        console.print(text, markup=False, highlight=False, soft_wrap=True)
