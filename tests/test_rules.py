from __future__ import annotations

import pytest
from helpers import make_ctx

from stylepipe.rules.registry import available_rules, builtin_rules
from stylepipe.rules.style import (
    DisallowKeywords,
    DisallowMultipleVarDecl,
    DisallowSpacesInsideObjectBrackets,
    DisallowTrailingWhitespace,
    MaximumLineLength,
    RequireLineFeedAtFileEnd,
    ValidateQuoteMarks,
)


def _positions(violations) -> list[tuple[int, int]]:
    return [(v.line, v.column) for v in violations]


def test_builtin_rules_are_sorted_and_snake_case() -> None:
    names = [r.meta.name for r in builtin_rules()]
    assert names == sorted(names)
    assert "disallow_multiple_var_decl" in names
    assert set(available_rules()) == set(names)


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("var x = 1,y = 2;", [(1, 0)]),
        ("var x = 1; var y = 2;", []),
        ("let a = f(1, 2);", []),
        ("const o = {a: 1, b: 2};", []),
        ("for (var i = 0, n = 3; i < n; i++) {}", []),
        ("  let a,\n    b;", [(1, 2)]),
        ("var s = 'a,b';", []),
    ],
)
def test_disallow_multiple_var_decl(source: str, expected: list[tuple[int, int]]) -> None:
    rule = DisallowMultipleVarDecl()
    violations = rule.check_file(make_ctx(source), True)
    assert _positions(violations) == expected
    assert all(v.message == "Multiple var declaration" for v in violations)


def test_spaces_inside_object_brackets() -> None:
    rule = DisallowSpacesInsideObjectBrackets()
    violations = rule.check_file(make_ctx("var x = { a: 1 };"), "all")

    assert [v.message for v in violations] == [
        "Illegal space after opening curly brace",
        "Illegal space before closing curly brace",
    ]
    assert _positions(violations) == [(1, 8), (1, 15)]


@pytest.mark.parametrize(
    "source",
    [
        "function f() { return 1; }",
        "if (a) { b(); }",
        "var x = {};",
        "var x = { };",
        "var f = () => { go(); };",
        "var x = {\n  a: 1\n};",
        "var s = '{ a }';",
        "switch (x) {\n  case 1: { foo(); }\n}\n",
        "switch (x) {\n  default: { foo(); }\n}\n",
        "outer: { foo(); }",
    ],
)
def test_spaces_inside_blocks_and_empty_objects_are_allowed(source: str) -> None:
    rule = DisallowSpacesInsideObjectBrackets()
    assert rule.check_file(make_ctx(source), "all") == []


def test_object_after_return_is_checked() -> None:
    rule = DisallowSpacesInsideObjectBrackets()
    violations = rule.check_file(make_ctx("function f() { return { a: 1 }; }"), "all")
    assert len(violations) == 2


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("var o = {a: { b: 1 }};", [(1, 12), (1, 19)]),
        ("var t = c ? a : { b: 1 };", [(1, 16), (1, 23)]),
    ],
)
def test_object_after_colon_is_checked(source: str, expected: list[tuple[int, int]]) -> None:
    rule = DisallowSpacesInsideObjectBrackets()
    assert _positions(rule.check_file(make_ctx(source), "all")) == expected


def test_require_line_feed_at_file_end() -> None:
    rule = RequireLineFeedAtFileEnd()
    [violation] = rule.check_file(make_ctx("var x = 1;"), True)
    assert violation.message == "Missing line feed at file end"
    assert _positions([violation]) == [(1, 10)]
    assert rule.check_file(make_ctx("var x = 1;\n"), True) == []
    assert rule.check_file(make_ctx(""), True) == []


def test_disallow_trailing_whitespace() -> None:
    rule = DisallowTrailingWhitespace()
    source = "var x = 1;  \n  \nvar y = 2;\t\n"

    assert _positions(rule.check_file(make_ctx(source), "all")) == [(1, 10), (2, 0), (3, 10)]
    assert _positions(rule.check_file(make_ctx(source), "ignore_empty_lines")) == [(1, 10), (3, 10)]


def test_trailing_whitespace_inside_template_literal_is_ignored() -> None:
    rule = DisallowTrailingWhitespace()
    assert rule.check_file(make_ctx("var t = `a  \nb`;\n"), "all") == []


def test_trailing_whitespace_configure_accepts_camel_case() -> None:
    assert DisallowTrailingWhitespace().configure("ignoreEmptyLines") == "ignore_empty_lines"


def test_maximum_line_length() -> None:
    rule = MaximumLineLength()
    option = rule.configure({"value": 10})
    [violation] = rule.check_file(make_ctx("var x = 1;\nvar longer = 2;\n"), option)
    assert violation.message == "Line must be at most 10 characters"
    assert _positions([violation]) == [(2, 10)]


def test_validate_quote_marks_fixed_style() -> None:
    rule = ValidateQuoteMarks()
    violations = rule.check_file(make_ctx("var a = 'x'; var b = \"y\"; var c = `z`;"), "'")
    assert _positions(violations) == [(1, 21)]
    assert violations[0].message == "Invalid quote mark found"


def test_validate_quote_marks_consistent_style_follows_first_string() -> None:
    rule = ValidateQuoteMarks()
    violations = rule.check_file(make_ctx("var a = \"x\"; var b = 'y';"), True)
    assert _positions(violations) == [(1, 21)]


def test_quote_marks_inside_comments_are_ignored() -> None:
    rule = ValidateQuoteMarks()
    assert rule.check_file(make_ctx("// it's fine\nvar a = 'x';\n"), "'") == []


def test_disallow_keywords() -> None:
    rule = DisallowKeywords()
    option = rule.configure(["with", "eval"])
    violations = rule.check_file(make_ctx("with (o) { eval('x'); }\nvar withdraw = o.with;\n"), option)
    assert [v.message for v in violations] == ["Illegal keyword: with", "Illegal keyword: eval"]


def test_keywords_in_strings_are_ignored() -> None:
    rule = DisallowKeywords()
    assert rule.check_file(make_ctx("var s = 'with';"), ("with",)) == []
