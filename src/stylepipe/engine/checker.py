from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from stylepipe.config import StyleConfig
from stylepipe.engine.autofix import apply_edits
from stylepipe.engine.context import FileContext, build_file_context
from stylepipe.engine.types import DiagnosticResult, FixOutcome, Violation
from stylepipe.rules.base import BaseRule, RuleMeta
from stylepipe.rules.registry import available_rules

logger = logging.getLogger(__name__)

PARSE_ERROR_RULE = "parse_error"
MAX_FIX_PASSES = 10

_MODULE_SYNTAX_RE = re.compile(r"(?m)^[ \t]*(import|export)(?![\w$])(?!\s*\()")

_Finding = tuple[BaseRule, Any, Violation]


class StyleChecker:
    """
    Built-in `CheckEngine`: runs the configured rules over JavaScript source.

    The active rule set is resolved once from the configuration; `check` and
    `fix` are pure functions of their input text.
    """

    def __init__(self, config: StyleConfig, *, rules: Iterable[BaseRule] | None = None) -> None:
        if rules is None:
            available = available_rules(config.plugin_rules)
        else:
            available = {r.meta.name: r for r in rules}
        self._esnext = config.esnext
        self._active: tuple[tuple[BaseRule, Any], ...] = tuple(
            (available[name], option) for name, option in config.rules.items() if name in available
        )

    @property
    def rule_names(self) -> tuple[str, ...]:
        return tuple(rule.meta.name for rule, _ in self._active)

    def check(self, text: str, *, filename: str) -> DiagnosticResult:
        ctx = build_file_context(filename, text, esnext=self._esnext)
        violations = tuple(v for _, _, v in self._findings(ctx))
        return DiagnosticResult(filename=filename, violations=violations, source=text)

    def fix(self, text: str, *, filename: str) -> FixOutcome:
        current = text
        fixed: list[Violation] = []
        passes = 0
        while passes < MAX_FIX_PASSES:
            ctx = build_file_context(filename, current, esnext=self._esnext)
            planned = [
                (violation, rule.fix_edits(ctx, violation, option))
                for rule, option, violation in self._findings(ctx)
                if rule.meta.fixable
            ]
            updated, applied = apply_edits(current, planned)
            if not applied or updated == current:
                break
            passes += 1
            fixed.extend(replace(v, fixed=True) for v in applied)
            current = updated

        if passes == MAX_FIX_PASSES:
            logger.debug("%s: fixes still pending after %d passes", filename, passes)

        return FixOutcome(
            output=current,
            result=self.check(current, filename=filename),
            fixed=tuple(fixed),
            passes=passes,
        )

    def _findings(self, ctx: FileContext) -> list[_Finding]:
        parse_error = _parse_error(ctx)
        if parse_error is not None:
            # Nothing else is reliable on a file that does not parse.
            return [parse_error]

        findings: list[_Finding] = []
        for rule, option in self._active:
            for violation in rule.check_file(ctx, option):
                if ctx.suppressions.is_suppressed(violation.rule, line=violation.line):
                    continue
                findings.append((rule, option, violation))
        findings.sort(key=lambda f: (f[2].line, f[2].column))
        return findings


class _ParseErrorRule(BaseRule):
    meta = RuleMeta(
        name=PARSE_ERROR_RULE,
        title="Parse error",
        description="The file could not be tokenized, or uses module syntax without esnext.",
    )


_PARSE_ERROR = _ParseErrorRule()


def _parse_error(ctx: FileContext) -> _Finding | None:
    error = ctx.scanned.error
    if error is not None:
        line, column = ctx.position(error.offset)
        return _PARSE_ERROR, None, Violation(rule=PARSE_ERROR_RULE, message=error.message, line=line, column=column)

    if ctx.esnext:
        return None
    match = _MODULE_SYNTAX_RE.search(ctx.code)
    if match is None:
        return None
    line, column = ctx.position(match.start(1))
    message = f"Unexpected reserved word '{match.group(1)}' (module syntax requires esnext)"
    return _PARSE_ERROR, None, Violation(rule=PARSE_ERROR_RULE, message=message, line=line, column=column)
