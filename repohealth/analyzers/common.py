"""Shared machinery of the language analyzers.

An analyzer finds the source files of one language in a repository,
analyzes each of them and summarises functions and complexity.
"""

from __future__ import annotations

import abc
import logging
import os
import threading
from collections.abc import Iterator
from typing import Any

from repohealth.models import (
    AnalysisCancelled,
    AnalysisResult,
    AnalyzerConfig,
    FileAnalysis,
    Repository,
)

_log = logging.getLogger(__name__)


def _walk(root: str) -> Iterator[str]:
    """Yield every non-directory path below ``root`` in lexical order."""
    os.lstat(root)  # raises when the root is missing
    if not os.path.isdir(root) or os.path.islink(root):
        yield root
        return
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda entry: entry.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk(entry.path)
        else:
            yield entry.path


class LanguageAnalyzer(abc.ABC):
    """Base class for analyzers of one programming language."""

    name: str = ""
    language: str = ""
    extensions: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger if logger is not None else _log

    def can_analyze(self, repo: Repository) -> bool:
        """Whether the repository holds any file of this language."""
        try:
            return bool(self.find_files(repo.path))
        except OSError:
            return False

    def find_files(self, repo_path: str) -> list[str]:
        """All source files of this language, minus excluded paths."""
        root = os.fspath(repo_path)
        return [path for path in _walk(root) if self._wanted(root, path)]

    def _wanted(self, root: str, path: str) -> bool:
        if not path.endswith(self.extensions):
            return False
        rel = os.path.relpath(path, root).replace(os.sep, "/")
        return not any(exclude in rel for exclude in self.excludes)

    @abc.abstractmethod
    def analyze_file(self, file_path: str) -> FileAnalysis:
        """Analyze one source file."""

    def analyze(
        self,
        repo_path: str,
        config: AnalyzerConfig | None = None,
        cancel_event: threading.Event | None = None,
    ) -> AnalysisResult:
        """Analyze every source file of the repository.

        Files that cannot be read or parsed are logged and skipped.
        Raises AnalysisCancelled once ``cancel_event`` is set.
        """
        self.logger.info("Starting %s analysis of %s", self.language, repo_path)
        result = AnalysisResult(language=self.language)

        for path in self.find_files(repo_path):
            if cancel_event is not None and cancel_event.is_set():
                raise AnalysisCancelled(f"{self.language} analysis cancelled")
            try:
                analysis = self.analyze_file(path)
            except (OSError, ValueError, SyntaxError) as exc:
                self.logger.warning("Failed to analyze file %s: %s", path, exc)
                continue
            result.files[path] = analysis
            result.functions.extend(analysis.functions)

        complexities = [fn.complexity for fn in result.functions]
        total = sum(complexities)
        result.metrics["total_files"] = len(result.files)
        result.metrics["total_functions"] = len(complexities)
        result.metrics["total_complexity"] = total
        result.metrics["max_complexity"] = max(complexities, default=0)
        result.metrics["average_complexity"] = total / len(complexities) if complexities else 0.0
        result.metrics.update(self._extra_metrics(result))

        self.logger.info(
            "%s analysis completed: %d files, %d functions",
            self.language,
            len(result.files),
            len(complexities),
        )
        return result

    def _extra_metrics(self, result: AnalysisResult) -> dict[str, Any]:
        """Language-specific repository metrics; none by default."""
        return {}

    @staticmethod
    def _finish_file(analysis: FileAnalysis) -> FileAnalysis:
        """Record the function count and average complexity of a file."""
        analysis.metrics["function_count"] = len(analysis.functions)
        if analysis.functions:
            total = sum(fn.complexity for fn in analysis.functions)
            analysis.metrics["average_complexity"] = total / len(analysis.functions)
        return analysis