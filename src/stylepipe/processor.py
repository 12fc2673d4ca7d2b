from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from stylepipe.config import StyleConfig, resolve_config
from stylepipe.engine.checker import StyleChecker
from stylepipe.engine.types import CheckEngine
from stylepipe.files import CheckedFile, FileReadError, SourceFile

logger = logging.getLogger(__name__)


class FileProcessor:
    """
    Pipeline stage that checks (or fixes) each file and attaches its result.

    Every incoming file produces exactly one `CheckedFile`, in arrival order.
    Null and excluded files are forwarded without a result.
    """

    def __init__(self, config: StyleConfig, *, engine: CheckEngine | None = None) -> None:
        self.config = config
        self.engine: CheckEngine = engine if engine is not None else StyleChecker(config)
        if isinstance(self.engine, StyleChecker):
            logger.debug("active rules: %s", ", ".join(self.engine.rule_names) or "none")

    def __call__(self, files: Iterable[SourceFile]) -> Iterator[CheckedFile]:
        for source in files:
            yield self.process(source)

    def process(self, source: SourceFile) -> CheckedFile:
        if source.is_null():
            return CheckedFile(source)

        if self.config.is_excluded(source.path):
            logger.debug("excluded %s", source.relative)
            return CheckedFile(source)

        text = _decode(source)
        filename = source.relative
        if not self.config.fix:
            logger.debug("checking %s", filename)
            return CheckedFile(source, self.engine.check(text, filename=filename))

        outcome = self.engine.fix(text, filename=filename)
        if outcome.fixed:
            logger.debug("fixed %d violation(s) in %s", len(outcome.fixed), filename)
        if outcome.output == text:
            return CheckedFile(source, outcome.result)
        return CheckedFile(source.with_contents(outcome.output.encode("utf-8")), outcome.result)


def check(
    options: Mapping[str, Any] | None = None,
    *,
    engine: CheckEngine | None = None,
    cwd: Path | str | None = None,
) -> FileProcessor:
    """
    Build the check stage for one pipeline run.

    Configuration is resolved here, so conflicting or invalid options raise
    before any file is processed.
    """

    return FileProcessor(resolve_config(options, cwd=cwd), engine=engine)


def _decode(source: SourceFile) -> str:
    assert source.contents is not None
    try:
        return source.contents.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FileReadError(source.path, f"contents are not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc
