from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from rich.console import Console

from stylepipe.engine.types import DiagnosticResult
from stylepipe.files import CheckedFile
from stylepipe.reporters.console import report_console
from stylepipe.reporters.github import report_github
from stylepipe.reporters.inline import report_inline
from stylepipe.reporters.json_reporter import report_json
from stylepipe.utils import normalize_key

logger = logging.getLogger(__name__)

ResultsCallback = Callable[[list[DiagnosticResult]], object]
Formatter = Callable[..., None]


class ReporterConfigError(ValueError):
    """Raised when `reporter()` is given an unknown name or an unusable value."""


class StyleCheckFailed(RuntimeError):
    """Raised by the failing reporters when at least one file has violations."""

    def __init__(self, filenames: Sequence[str]) -> None:
        self.filenames = tuple(filenames)
        super().__init__(f"stylepipe: style check failed for {', '.join(self.filenames)}")


class ReporterKind(Enum):
    CONSOLE = "console"
    INLINE = "inline"
    JSON = "json"
    GITHUB = "github"
    FAIL = "fail"
    FAIL_IMMEDIATELY = "fail_immediately"
    FUNCTION = "function"


_FORMATTERS: dict[ReporterKind, Formatter] = {
    ReporterKind.CONSOLE: report_console,
    ReporterKind.INLINE: report_inline,
    ReporterKind.JSON: report_json,
    ReporterKind.GITHUB: report_github,
}


def builtin_reporter_names() -> tuple[str, ...]:
    return tuple(kind.value for kind in ReporterKind if kind is not ReporterKind.FUNCTION)


@dataclass(frozen=True, slots=True)
class ReporterSpec:
    kind: ReporterKind
    callback: ResultsCallback | None = None

    @classmethod
    def resolve(cls, value: str | ResultsCallback | None) -> ReporterSpec:
        if value is None:
            return cls(ReporterKind.CONSOLE)

        if isinstance(value, str):
            key = normalize_key(value)
            if key != ReporterKind.FUNCTION.value:
                for kind in ReporterKind:
                    if kind.value == key:
                        return cls(kind)
            valid = ", ".join(builtin_reporter_names())
            raise ReporterConfigError(f"Unknown reporter {value!r}. Built-in reporters: {valid}.")

        if callable(value):
            return cls(ReporterKind.FUNCTION, value)

        raise ReporterConfigError(
            f"Reporter must be a built-in reporter name or a callable, got {type(value).__name__}."
        )


class ActionKind(Enum):
    CONTINUE = "continue"
    HALT = "halt"
    FAIL = "fail"


@dataclass(frozen=True, slots=True)
class Action:
    kind: ActionKind
    error: Exception | None = None


CONTINUE = Action(ActionKind.CONTINUE)


class ReportStrategy(Protocol):
    def observe(self, checked: CheckedFile) -> Action: ...

    def finish(self) -> Action: ...


class RenderStrategy:
    """Collect results while files pass, hand them to `render` once at the end."""

    def __init__(self, render: Callable[[list[DiagnosticResult]], object]) -> None:
        self._render = render
        self._results: list[DiagnosticResult] = []

    def observe(self, checked: CheckedFile) -> Action:
        if checked.result is not None:
            self._results.append(checked.result)
        return CONTINUE

    def finish(self) -> Action:
        self._render(list(self._results))
        return CONTINUE


class FailStrategy:
    def __init__(self) -> None:
        self._failed: list[str] = []

    def observe(self, checked: CheckedFile) -> Action:
        if not checked.success:
            self._failed.append(_display_name(checked))
        return CONTINUE

    def finish(self) -> Action:
        if self._failed:
            return Action(ActionKind.FAIL, StyleCheckFailed(self._failed))
        return CONTINUE


class FailImmediatelyStrategy:
    def observe(self, checked: CheckedFile) -> Action:
        if not checked.success:
            return Action(ActionKind.HALT, StyleCheckFailed([_display_name(checked)]))
        return CONTINUE

    def finish(self) -> Action:
        return CONTINUE


def _display_name(checked: CheckedFile) -> str:
    return checked.result.filename if checked.result is not None else checked.file.relative


class ReporterDispatcher:
    """
    Pipeline stage that forwards checked files unchanged while feeding them
    to a reporter strategy.

    A fresh strategy is created for every run. A `HALT` action re-emits the
    offending file and then raises before pulling anything else from
    upstream; a `FAIL` action raises once the input is exhausted.
    """

    def __init__(self, spec: ReporterSpec, *, console: Console | None = None) -> None:
        self.spec = spec
        self._console = console

    def new_strategy(self) -> ReportStrategy:
        kind = self.spec.kind
        if kind is ReporterKind.FAIL:
            return FailStrategy()
        if kind is ReporterKind.FAIL_IMMEDIATELY:
            return FailImmediatelyStrategy()
        if kind is ReporterKind.FUNCTION:
            assert self.spec.callback is not None
            return RenderStrategy(self.spec.callback)

        formatter = _FORMATTERS[kind]
        console = self._console if self._console is not None else Console()
        return RenderStrategy(lambda results: formatter(results, console=console))

    def __call__(self, files: Iterable[CheckedFile]) -> Iterator[CheckedFile]:
        strategy = self.new_strategy()
        for checked in files:
            action = strategy.observe(checked)
            yield checked
            if action.kind is ActionKind.HALT and action.error is not None:
                logger.debug("%s reporter tripped on %s", self.spec.kind.value, _display_name(checked))
                raise action.error

        action = strategy.finish()
        if action.error is not None:
            raise action.error


def reporter(kind: str | ResultsCallback | None = None, *, console: Console | None = None) -> ReporterDispatcher:
    """
    Build a reporter stage.

    `kind` is None (console output), a built-in name (`console`, `inline`,
    `json`, `github`, `fail`, `fail_immediately`; camelCase accepted), or a
    callable receiving the ordered list of `DiagnosticResult`s once at the
    end of the stream. Invalid values raise `ReporterConfigError` here.
    """

    return ReporterDispatcher(ReporterSpec.resolve(kind), console=console)
