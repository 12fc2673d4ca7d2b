from __future__ import annotations

from dataclasses import dataclass

# A `/` after one of these tokens starts a regular expression literal, not a division.
_REGEX_PRECEDERS = frozenset("(,=:[!&|?{};+-*%<>~^")
_REGEX_KEYWORDS = frozenset(
    {"return", "typeof", "instanceof", "in", "of", "new", "delete", "void", "throw", "case", "do", "else"}
)
_QUOTES = frozenset("'\"`")
_STRING_FILL = "_"
_COMMENT_FILL = " "


@dataclass(frozen=True, slots=True)
class StringToken:
    start: int  # offset of the opening quote
    end: int  # offset just past the closing quote
    quote: str
    terminated: bool = True


@dataclass(frozen=True, slots=True)
class LexError:
    offset: int
    message: str


@dataclass(frozen=True, slots=True)
class ScannedSource:
    """
    JavaScript source with literal and comment contents masked out.

    `code` has the same length and newline positions as the input. String,
    template and regex literal contents are replaced with `_` (quotes kept);
    comments are replaced with spaces. Rules match structure against `code`
    and take exact characters from the original text.
    """

    code: str
    strings: tuple[StringToken, ...]
    comments: tuple[tuple[int, int], ...]
    error: LexError | None = None


def scan_source(text: str) -> ScannedSource:
    out = list(text)
    strings: list[StringToken] = []
    comments: list[tuple[int, int]] = []
    error: LexError | None = None
    previous = ""

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""

        if ch == "/" and nxt == "/":
            end = text.find("\n", i)
            end = n if end == -1 else end
            _fill(out, i, end, _COMMENT_FILL)
            comments.append((i, end))
            i = end
            continue

        if ch == "/" and nxt == "*":
            close = text.find("*/", i + 2)
            if close == -1:
                end = n
                error = error or LexError(i, "Unterminated comment")
            else:
                end = close + 2
            _fill(out, i, end, _COMMENT_FILL)
            comments.append((i, end))
            i = end
            continue

        if ch in _QUOTES:
            end, terminated = _string_end(text, i, ch)
            content_end = end - 1 if terminated else end
            _fill(out, i + 1, content_end, _STRING_FILL)
            strings.append(StringToken(start=i, end=end, quote=ch, terminated=terminated))
            if not terminated:
                error = error or LexError(i, "Unterminated string literal")
            previous = ch
            i = end
            continue

        if ch == "/" and _starts_regex(previous):
            end = _regex_end(text, i)
            if end is not None:
                _fill(out, i + 1, end - 1, _STRING_FILL)
                previous = "/"
                i = end
                continue

        if _is_word_char(ch):
            end = i + 1
            while end < n and _is_word_char(text[end]):
                end += 1
            previous = text[i:end]
            i = end
            continue

        if not ch.isspace():
            previous = ch
        i += 1

    return ScannedSource(code="".join(out), strings=tuple(strings), comments=tuple(comments), error=error)


def _fill(out: list[str], start: int, end: int, fill: str) -> None:
    for k in range(start, end):
        if out[k] != "\n":
            out[k] = fill


def _string_end(text: str, start: int, quote: str) -> tuple[int, bool]:
    j = start + 1
    n = len(text)
    while j < n:
        c = text[j]
        if c == "\\":
            j += 2
            continue
        if c == quote:
            return j + 1, True
        if c == "\n" and quote != "`":
            return j, False
        j += 1
    return n, False


def _regex_end(text: str, start: int) -> int | None:
    j = start + 1
    n = len(text)
    in_class = False
    while j < n:
        c = text[j]
        if c == "\n":
            return None
        if c == "\\":
            j += 2
            continue
        if c == "[":
            in_class = True
        elif c == "]":
            in_class = False
        elif c == "/" and not in_class:
            return j + 1
        j += 1
    return None


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


def _starts_regex(previous: str) -> bool:
    # `previous` is the last significant token: a punctuator character or a whole word.
    return not previous or previous in _REGEX_PRECEDERS or previous in _REGEX_KEYWORDS
