from __future__ import annotations

import re
from typing import Any

from stylepipe.engine.context import FileContext
from stylepipe.engine.types import Violation
from stylepipe.rules.base import BaseRule, RuleMeta, TextEdit

_DECLARATION_RE = re.compile(r"(?<![\w$.])(?:var|let|const)(?![\w$])")
_FOR_HEADER_RE = re.compile(r"(?<![\w$.])for\s*$")
_RETURN_RE = re.compile(r"(?<![\w$.])return$")
# The statement before a block-opening `:` in `case x:`, `default:` or `label:`.
_LABEL_STATEMENT_RE = re.compile(r"(?s)case(?![\w$]).*|[A-Za-z_$][\w$]*")
_INLINE_SPACE = " \t"
_OPENERS = "([{"
_CLOSERS = ")]}"
# A `{` following one of these opens an object literal rather than a block.
_OBJECT_PRECEDERS = frozenset("=(,:[?&|!")


class DisallowMultipleVarDecl(BaseRule):
    meta = RuleMeta(
        name="disallow_multiple_var_decl",
        title="Multiple var declaration",
        description="Declare one variable per var/let/const statement (for-loop headers are exempt).",
    )

    def check_file(self, ctx: FileContext, option: Any) -> list[Violation]:
        code = ctx.code
        out: list[Violation] = []
        for match in _DECLARATION_RE.finditer(code):
            if _FOR_HEADER_RE.search(code[: match.start()].rstrip().removesuffix("(")):
                continue
            if _declares_multiple(code, match.end()):
                out.append(self._violation(ctx, match.start()))
        return out


def _declares_multiple(code: str, start: int) -> bool:
    depth = 0
    i = start
    n = len(code)
    while i < n:
        c = code[i]
        if c in _OPENERS:
            depth += 1
        elif c in _CLOSERS:
            if depth == 0:
                return False
            depth -= 1
        elif depth == 0:
            if c == ";":
                return False
            if c == ",":
                return True
            if _DECLARATION_RE.match(code, i):
                return False
        i += 1
    return False


class DisallowSpacesInsideObjectBrackets(BaseRule):
    meta = RuleMeta(
        name="disallow_spaces_inside_object_brackets",
        title="Illegal space inside object brackets",
        description="Object literals must not pad their curly braces with spaces: `{a: 1}`.",
        fixable=True,
    )

    def configure(self, value: Any) -> Any:
        if value is True or value == "all":
            return "all"
        raise ValueError('must be true or "all"')

    def check_file(self, ctx: FileContext, option: Any) -> list[Violation]:
        text = ctx.text
        out: list[Violation] = []
        for open_at, close_at in _object_brace_pairs(ctx.code):
            if not ctx.code[open_at + 1 : close_at].strip():
                continue
            after = _skip_inline_space(text, open_at + 1)
            if after > open_at + 1 and text[after] not in "\r\n":
                out.append(self._violation(ctx, open_at, message="Illegal space after opening curly brace"))
            before = _skip_inline_space_backwards(text, close_at)
            if before < close_at and before > 0 and text[before - 1] != "\n":
                out.append(self._violation(ctx, close_at, message="Illegal space before closing curly brace"))
        return out

    def fix_edits(self, ctx: FileContext, violation: Violation, option: Any) -> list[TextEdit]:
        offset = ctx.offset(violation.line, violation.column)
        if ctx.text[offset] == "{":
            return [TextEdit(start=offset + 1, end=_skip_inline_space(ctx.text, offset + 1))]
        if ctx.text[offset] == "}":
            return [TextEdit(start=_skip_inline_space_backwards(ctx.text, offset), end=offset)]
        return []


def _object_brace_pairs(code: str) -> list[tuple[int, int]]:
    pairs: list[tuple[int, int]] = []
    stack: list[tuple[int, bool]] = []
    for i, c in enumerate(code):
        if c == "{":
            in_object = bool(stack) and stack[-1][1]
            stack.append((i, _opens_object(code, i, in_object=in_object)))
        elif c == "}" and stack:
            start, is_object = stack.pop()
            if is_object:
                pairs.append((start, i))
    pairs.sort()
    return pairs


def _opens_object(code: str, brace_at: int, *, in_object: bool) -> bool:
    prefix = code[:brace_at].rstrip()
    if not prefix:
        return False
    if prefix[-1] == ":" and not in_object and _is_statement_label(prefix[:-1]):
        return False
    return prefix[-1] in _OBJECT_PRECEDERS or bool(_RETURN_RE.search(prefix))


def _is_statement_label(before_colon: str) -> bool:
    cut = max(before_colon.rfind(c) for c in ";{}")
    statement = before_colon[cut + 1 :].strip()
    return bool(_LABEL_STATEMENT_RE.fullmatch(statement))


def _skip_inline_space(text: str, start: int) -> int:
    i = start
    while i < len(text) and text[i] in _INLINE_SPACE:
        i += 1
    return i


def _skip_inline_space_backwards(text: str, end: int) -> int:
    i = end
    while i > 0 and text[i - 1] in _INLINE_SPACE:
        i -= 1
    return i


class RequireLineFeedAtFileEnd(BaseRule):
    meta = RuleMeta(
        name="require_line_feed_at_file_end",
        title="Missing line feed at file end",
        description="Files must end with a newline.",
        fixable=True,
    )

    def check_file(self, ctx: FileContext, option: Any) -> list[Violation]:
        if not ctx.text or ctx.text.endswith("\n"):
            return []
        return [self._violation(ctx, len(ctx.text))]

    def fix_edits(self, ctx: FileContext, violation: Violation, option: Any) -> list[TextEdit]:
        end = len(ctx.text)
        return [TextEdit(start=end, end=end, replacement="\n")]


class DisallowTrailingWhitespace(BaseRule):
    meta = RuleMeta(
        name="disallow_trailing_whitespace",
        title="Illegal trailing whitespace",
        description="Lines must not end with spaces or tabs.",
        fixable=True,
    )

    def configure(self, value: Any) -> Any:
        if value is True:
            return "all"
        if isinstance(value, str) and value.replace("-", "_").lower() in {"ignore_empty_lines", "ignoreemptylines"}:
            return "ignore_empty_lines"
        raise ValueError('must be true or "ignore_empty_lines"')

    def check_file(self, ctx: FileContext, option: Any) -> list[Violation]:
        out: list[Violation] = []
        for idx, line in enumerate(ctx.lines):
            stripped = line.rstrip(" \t\f\v")
            if len(stripped) == len(line):
                continue
            if option == "ignore_empty_lines" and not stripped:
                continue
            offset = ctx.line_starts[idx] + len(stripped)
            if ctx.code[offset] == "_":
                # Inside a multi-line template literal.
                continue
            out.append(self._violation(ctx, offset))
        return out

    def fix_edits(self, ctx: FileContext, violation: Violation, option: Any) -> list[TextEdit]:
        start = ctx.offset(violation.line, violation.column)
        return [TextEdit(start=start, end=ctx.line_starts[violation.line - 1] + len(ctx.lines[violation.line - 1]))]


class MaximumLineLength(BaseRule):
    meta = RuleMeta(
        name="maximum_line_length",
        title="Line too long",
        description="Lines must not exceed the configured number of characters.",
    )

    def configure(self, value: Any) -> Any:
        if isinstance(value, dict):
            value = value.get("value")
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError("must be a positive integer")
        return value

    def check_file(self, ctx: FileContext, option: Any) -> list[Violation]:
        message = f"Line must be at most {option} characters"
        return [
            self._violation(ctx, ctx.line_starts[idx] + option, message=message)
            for idx, line in enumerate(ctx.lines)
            if len(line) > option
        ]


class ValidateQuoteMarks(BaseRule):
    meta = RuleMeta(
        name="validate_quote_marks",
        title="Invalid quote mark found",
        description="String literals must use the configured quote mark (true: whichever the file uses first).",
        fixable=True,
    )

    def configure(self, value: Any) -> Any:
        if value is True or value in ("'", '"'):
            return value
        raise ValueError("must be true, \"'\" or '\"'")

    def check_file(self, ctx: FileContext, option: Any) -> list[Violation]:
        tokens = [t for t in ctx.scanned.strings if t.quote != "`"]
        if not tokens:
            return []
        expected = tokens[0].quote if option is True else option
        return [self._violation(ctx, t.start) for t in tokens if t.quote != expected]

    def fix_edits(self, ctx: FileContext, violation: Violation, option: Any) -> list[TextEdit]:
        token = ctx.string_at(ctx.offset(violation.line, violation.column))
        if token is None or not token.terminated:
            return []
        tokens = [t for t in ctx.scanned.strings if t.quote != "`"]
        expected = tokens[0].quote if option is True else option
        content = ctx.text[token.start + 1 : token.end - 1]
        if expected in content or "\\" in content:
            return []
        return [
            TextEdit(start=token.start, end=token.start + 1, replacement=expected),
            TextEdit(start=token.end - 1, end=token.end, replacement=expected),
        ]


class DisallowKeywords(BaseRule):
    meta = RuleMeta(
        name="disallow_keywords",
        title="Illegal keyword",
        description="The listed keywords (for example `with`) must not be used.",
    )

    def configure(self, value: Any) -> Any:
        if not isinstance(value, list) or not value or any(not isinstance(v, str) or not v.strip() for v in value):
            raise ValueError("must be a non-empty list of keywords")
        return tuple(v.strip() for v in value)

    def check_file(self, ctx: FileContext, option: Any) -> list[Violation]:
        pattern = re.compile(r"(?<![\w$.])(" + "|".join(re.escape(k) for k in option) + r")(?![\w$])")
        return [
            self._violation(ctx, match.start(), message=f"Illegal keyword: {match.group(1)}")
            for match in pattern.finditer(ctx.code)
        ]


def builtin_style_rules() -> list[BaseRule]:
    return [
        DisallowKeywords(),
        DisallowMultipleVarDecl(),
        DisallowSpacesInsideObjectBrackets(),
        DisallowTrailingWhitespace(),
        MaximumLineLength(),
        RequireLineFeedAtFileEnd(),
        ValidateQuoteMarks(),
    ]
