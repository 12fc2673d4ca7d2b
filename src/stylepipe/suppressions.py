from __future__ import annotations

import re
from collections import defaultdict
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from stylepipe.utils import normalize_key

WILDCARD = "all"

_DIRECTIVE_RE = re.compile(
    r"stylepipe:\s*(?P<scope>disable-next-line|disable[-_]?file|disable)\s*=\s*"
    r"(?P<names>[\w-]+(?:\s*,\s*[\w-]+)*)",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class Suppressions:
    """
    Rule suppressions declared in the file itself, usually inside comments:

        // stylepipe: disable-file=maximum_line_length
        var a = 1, b = 2; // stylepipe: disable=disallow_multiple_var_decl
        // stylepipe: disable-next-line=all

    Rule names may be written in any case style; `all` matches every rule.
    """

    file_wide: frozenset[str]
    by_line: Mapping[int, frozenset[str]]

    def is_suppressed(self, rule: str, *, line: int | None) -> bool:
        name = normalize_key(rule)
        if _matches(self.file_wide, name):
            return True
        return line is not None and _matches(self.by_line.get(line, frozenset()), name)


def _matches(names: frozenset[str], rule: str) -> bool:
    return WILDCARD in names or rule in names


def parse_suppressions(lines: Sequence[str]) -> Suppressions:
    file_wide: set[str] = set()
    by_line: defaultdict[int, set[str]] = defaultdict(set)

    for number, line in enumerate(lines, start=1):
        for match in _DIRECTIVE_RE.finditer(line):
            names = {normalize_key(n) for n in match.group("names").split(",")}
            scope = match.group("scope").lower()
            if scope == "disable":
                by_line[number] |= names
            elif scope == "disable-next-line":
                by_line[number + 1] |= names
            else:
                file_wide |= names

    return Suppressions(
        file_wide=frozenset(file_wide),
        by_line=MappingProxyType({n: frozenset(names) for n, names in by_line.items()}),
    )
