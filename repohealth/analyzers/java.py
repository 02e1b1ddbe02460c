"""Line-based analysis of Java source: classes, methods, imports and complexity."""

from __future__ import annotations

import logging
import re
from typing import Any

from repohealth.analyzers.common import LanguageAnalyzer
from repohealth.models import AnalysisResult, ClassInfo, FileAnalysis, FunctionInfo, ImportInfo

_CLASS_RE = re.compile(
    r"^\s*(?:public|private|protected)?\s*(?:abstract|final)?\s*class\s+"
    r"([a-zA-Z_][a-zA-Z0-9_]*)\s*(?:extends\s+([a-zA-Z_][a-zA-Z0-9_]*))?\s*"
    r"(?:implements\s+[a-zA-Z0-9_,\s<>]+)?\s*\{?",
    re.ASCII,
)
_METHOD_RE = re.compile(
    r"^\s*(?:public|private|protected)?\s*(?:static)?\s*(?:final)?\s*(?:abstract)?\s*"
    r"[a-zA-Z_<>\[\]]+\s+([a-zA-Z_][a-zA-Z0-9_]*)\s*\([^)]*\)\s*"
    r"(?:throws\s+[a-zA-Z0-9_,\s]+)?\s*\{?",
    re.ASCII,
)
_IMPORT_RE = re.compile(r"^\s*import\s+(?:static\s+)?([a-zA-Z_][a-zA-Z0-9_.*]+)\s*;", re.ASCII)


def _is_blank_or_comment(trimmed: str) -> bool:
    return not trimmed or trimmed.startswith(("//", "/*", "*"))


def _logical_operators(line: str) -> int:
    return line.count("&&") + line.count("||")


def _record_method(
    method: FunctionInfo, owner: ClassInfo | None, functions: list[FunctionInfo]
) -> None:
    functions.append(method)
    if owner is not None:
        owner.methods.append(method)


class JavaAnalyzer(LanguageAnalyzer):
    """Finds Java classes and methods by brace nesting and estimates complexity."""

    name = "java-analyzer"
    language = "java"
    extensions = (".java",)
    excludes = ("target/", "build/", ".git/", "bin/", "out/")

    def __init__(self, logger: logging.Logger | None = None) -> None:
        super().__init__(logger)

    def analyze_file(self, file_path: str) -> FileAnalysis:
        with open(file_path, "rb") as handle:
            content = handle.read().decode("utf-8", errors="replace")
        functions, classes, imports = self.parse(content, file_path)
        analysis = FileAnalysis(
            path=file_path,
            language=self.language,
            functions=functions,
            classes=classes,
            imports=imports,
        )
        analysis.metrics["class_count"] = len(classes)
        analysis.metrics["import_count"] = len(imports)
        return self._finish_file(analysis)

    def _extra_metrics(self, result: AnalysisResult) -> dict[str, Any]:
        return {"total_classes": sum(len(f.classes) for f in result.files.values())}

    def parse(
        self, content: str, file_path: str
    ) -> tuple[list[FunctionInfo], list[ClassInfo], list[ImportInfo]]:
        """Extract the methods, classes and imports of a Java source text."""
        functions: list[FunctionInfo] = []
        classes: list[ClassInfo] = []
        imports: list[ImportInfo] = []
        current_class: ClassInfo | None = None
        current_method: FunctionInfo | None = None
        brace_level = 0

        for line_num, line in enumerate(content.split("\n"), start=1):
            trimmed = line.strip()
            if _is_blank_or_comment(trimmed):
                continue

            brace_level += line.count("{") - line.count("}")

            import_match = _IMPORT_RE.match(line)
            if import_match:
                import_path = import_match.group(1)
                imports.append(
                    ImportInfo(
                        name=import_path.rsplit(".", 1)[-1],
                        path=import_path,
                        line=line_num,
                        is_local="." not in import_path,
                    )
                )

            class_match = _CLASS_RE.match(line)
            if class_match:
                if current_class is not None:
                    classes.append(current_class)
                current_class = ClassInfo(
                    name=class_match.group(1),
                    file=file_path,
                    line=line_num,
                    language=self.language,
                )

            method_match = _METHOD_RE.match(line)
            if method_match:
                if current_method is not None:
                    _record_method(current_method, current_class, functions)
                current_method = FunctionInfo(
                    name=method_match.group(1),
                    file=file_path,
                    line=line_num,
                    complexity=1,
                    language=self.language,
                )
            elif current_method is not None:
                current_method.complexity += self.line_complexity(trimmed)

            if brace_level == 0 and (current_method is not None or current_class is not None):
                if current_method is not None:
                    _record_method(current_method, current_class, functions)
                    current_method = None
                if current_class is not None:
                    classes.append(current_class)
                    current_class = None

        if current_method is not None:
            _record_method(current_method, current_class, functions)
        if current_class is not None:
            classes.append(current_class)
        return functions, classes, imports

    def line_complexity(self, line: str) -> int:
        """Complexity contributed by one line of a method body."""
        line = line.strip()
        if _is_blank_or_comment(line):
            return 0

        complexity = 0
        if "if" in line and ("(" in line or " " in line):
            complexity += 1 + _logical_operators(line)
        if "else if" in line:
            complexity += 1 + _logical_operators(line)
        if "for" in line and "(" in line:
            complexity += 1
        if "while" in line and "(" in line:
            complexity += 1 + _logical_operators(line)
        if "do" in line and ("{" in line or " " in line):
            complexity += 1
        if "for" in line and " : " in line:
            complexity += 1
        if "case " in line and ":" in line:
            complexity += 1
        if "catch" in line and "(" in line:
            complexity += 1
        if "?" in line and ":" in line:
            complexity += 1
        if "->" in line and ("if" in line or "?" in line):
            complexity += 1
        return complexity