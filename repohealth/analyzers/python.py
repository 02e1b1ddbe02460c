"""Line-based analysis of Python source: functions, imports and complexity."""

from __future__ import annotations

import logging
import re

from repohealth.analyzers.common import LanguageAnalyzer
from repohealth.models import FileAnalysis, FunctionInfo, ImportInfo

_FUNCTION_RE = re.compile(r"^\s*def\s+([a-zA-Z_][a-zA-Z0-9_]*)\s*\(", re.ASCII)
_IMPORT_RE = re.compile(
    r"^\s*(?:from\s+([a-zA-Z_][a-zA-Z0-9_.]*)\s+)?import\s+([a-zA-Z_][a-zA-Z0-9_.*,\s]+)",
    re.ASCII,
)


def _logical_operators(line: str) -> int:
    return line.count(" and ") + line.count(" or ")


class PythonAnalyzer(LanguageAnalyzer):
    """Finds Python functions by indentation and estimates their complexity."""

    name = "python-analyzer"
    language = "python"
    extensions = (".py",)
    excludes = (".venv/", "__pycache__/", ".git/", "venv/", "env/", ".pytest_cache/")

    def __init__(self, logger: logging.Logger | None = None) -> None:
        super().__init__(logger)

    def analyze_file(self, file_path: str) -> FileAnalysis:
        with open(file_path, encoding="utf-8", errors="replace") as handle:
            content = handle.read()
        functions, imports = self.parse(content, file_path)
        analysis = FileAnalysis(
            path=file_path, language=self.language, functions=functions, imports=imports
        )
        analysis.metrics["import_count"] = len(imports)
        return self._finish_file(analysis)

    def parse(self, content: str, file_path: str) -> tuple[list[FunctionInfo], list[ImportInfo]]:
        """Extract the functions and imports of a Python source text."""
        functions: list[FunctionInfo] = []
        imports: list[ImportInfo] = []
        current: FunctionInfo | None = None
        indent_level = 0

        for line_num, line in enumerate(content.split("\n"), start=1):
            trimmed = line.strip()
            if not trimmed or trimmed.startswith("#"):
                continue
            indent = len(line) - len(line.lstrip(" \t"))

            import_match = _IMPORT_RE.match(line)
            if import_match:
                imports.extend(self._imports(import_match, line_num))

            function_match = _FUNCTION_RE.match(line)
            if function_match:
                if current is not None:
                    functions.append(current)
                current = FunctionInfo(
                    name=function_match.group(1),
                    file=file_path,
                    line=line_num,
                    complexity=1,
                    language=self.language,
                )
                indent_level = indent
            elif current is not None:
                if indent <= indent_level:
                    functions.append(current)
                    current = None
                else:
                    current.complexity += self.line_complexity(trimmed)

        if current is not None:
            functions.append(current)
        return functions, imports

    @staticmethod
    def _imports(match: re.Match[str], line_num: int) -> list[ImportInfo]:
        from_module = match.group(1) or ""
        imports = []
        for raw_item in match.group(2).split(","):
            item = raw_item.strip()
            if not item:
                continue
            info = ImportInfo(
                name=item,
                path=from_module,
                line=line_num,
                is_local="." not in item and from_module == "",
            )
            if " as " in item:
                parts = item.split(" as ")
                if len(parts) == 2:
                    info.name = parts[0].strip()
                    info.alias = parts[1].strip()
            imports.append(info)
        return imports

    def line_complexity(self, line: str) -> int:
        """Complexity contributed by one line of a function body."""
        line = line.strip()
        if not line or line.startswith("#"):
            return 0

        complexity = 0
        if line.startswith("if ") or " if " in line:
            complexity += 1 + _logical_operators(line)
        if line.startswith("elif "):
            complexity += 1 + _logical_operators(line)
        if line.startswith("for "):
            complexity += 1
        if line.startswith("while "):
            complexity += 1 + _logical_operators(line)
        if line.startswith("except "):
            complexity += 1
        if line.startswith("with "):
            complexity += 1
        if "lambda " in line:
            complexity += 1
        if line.startswith("assert "):
            complexity += 1
        if " if " in line and ("[" in line or "{" in line):
            complexity += 1
        return complexity