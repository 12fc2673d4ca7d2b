from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from typing import Any

from stylepipe.engine.context import FileContext
from stylepipe.engine.types import Violation


@dataclass(frozen=True, slots=True)
class RuleMeta:
    name: str
    title: str
    description: str
    fixable: bool = False


@dataclass(frozen=True, slots=True)
class TextEdit:
    """Replace `text[start:end]` with `replacement` (offsets into the original text)."""

    start: int
    end: int
    replacement: str = ""


class BaseRule(ABC):
    meta: RuleMeta

    def configure(self, value: Any) -> Any:
        """
        Validate a configured option value and return its normalized form.

        Raise ValueError with a short reason; the configuration layer prefixes
        it with the rule name.
        """

        if value is not True:
            raise ValueError("must be true")
        return value

    def check_file(self, ctx: FileContext, option: Any) -> list[Violation]:
        return []

    def fix_edits(self, ctx: FileContext, violation: Violation, option: Any) -> list[TextEdit]:
        return []

    def _violation(self, ctx: FileContext, offset: int, *, message: str | None = None) -> Violation:
        line, column = ctx.position(offset)
        return Violation(
            rule=self.meta.name,
            message=message or self.meta.title,
            line=line,
            column=column,
        )
