"""Data types shared by the health checkers and the language analyzers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


class HealthStatus(str, enum.Enum):
    """Overall outcome of a health check."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    UNKNOWN = "unknown"


class Severity(str, enum.Enum):
    """How serious an issue is."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class Repository:
    """A repository on disk."""

    name: str = ""
    path: str = ""
    language: str = ""


@dataclass
class RepositoryContext:
    """Everything a checker gets to know about the repository it checks."""

    repository: Repository = field(default_factory=Repository)


@dataclass
class Location:
    """Where in the repository an issue was found."""

    file: str = ""
    line: int = 0
    column: int = 0


@dataclass
class Issue:
    """A problem found by a checker."""

    type: str = ""
    severity: Severity | None = None
    message: str = ""
    location: Location | None = None
    suggestion: str = ""
    context: dict[str, Any] = field(default_factory=dict)


@dataclass
class Warning:  # noqa: A001 - domain name for a check warning
    """A non-blocking remark made by a checker."""

    type: str = ""
    message: str = ""


@dataclass
class CheckerConfig:
    """Configuration of a single checker; the timeout is in seconds."""

    enabled: bool = True
    severity: str = ""
    timeout: float = 30.0
    categories: list[str] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class CheckResult:
    """Outcome of running one checker against one repository."""

    id: str = ""
    name: str = ""
    category: str = ""
    status: HealthStatus = HealthStatus.UNKNOWN
    score: int = 0
    max_score: int = 0
    issues: list[Issue] = field(default_factory=list)
    warnings: list[Warning] = field(default_factory=list)
    metrics: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, str] = field(default_factory=dict)
    duration: float = 0.0
    timestamp: datetime | None = None
    repository: str = ""


@dataclass
class FunctionInfo:
    """A function or method found by an analyzer."""

    name: str = ""
    file: str = ""
    line: int = 0
    complexity: int = 1
    language: str = ""


@dataclass
class ImportInfo:
    """An import statement found by an analyzer."""

    name: str = ""
    path: str = ""
    line: int = 0
    is_local: bool = False
    alias: str = ""


@dataclass
class FieldInfo:
    """A field of a class."""

    name: str = ""
    type: str = ""
    line: int = 0


@dataclass
class ClassInfo:
    """A class found by an analyzer."""

    name: str = ""
    file: str = ""
    line: int = 0
    language: str = ""
    methods: list[FunctionInfo] = field(default_factory=list)
    fields: list[FieldInfo] = field(default_factory=list)


@dataclass
class FileAnalysis:
    """Analysis of a single source file."""

    path: str = ""
    language: str = ""
    functions: list[FunctionInfo] = field(default_factory=list)
    classes: list[ClassInfo] = field(default_factory=list)
    imports: list[ImportInfo] = field(default_factory=list)
    metrics: dict[str, Any] = field(default_factory=dict)


@dataclass
class AnalysisResult:
    """Analysis of all files of one language in a repository."""

    language: str = ""
    files: dict[str, FileAnalysis] = field(default_factory=dict)
    functions: list[FunctionInfo] = field(default_factory=list)
    metrics: dict[str, Any] = field(default_factory=dict)


@dataclass
class AnalyzerConfig:
    """Language-specific analyzer settings."""

    enabled: bool = True
    options: dict[str, Any] = field(default_factory=dict)


class AnalysisCancelled(Exception):
    """Raised when an analysis is stopped before it finished."""