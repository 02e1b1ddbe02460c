"""Common checker behaviour and helpers for building check results.

Every checker has an id, a name and a category, and produces a
:class:`~repohealth.models.CheckResult` for a repository.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from repohealth.models import (
    CheckerConfig,
    CheckResult,
    HealthStatus,
    Issue,
    Location,
    Repository,
    RepositoryContext,
    Severity,
    Warning,
)


class BaseChecker:
    """Identity, configuration and timed execution shared by all checkers."""

    def __init__(
        self, id: str, name: str, category: str, config: CheckerConfig | None = None
    ) -> None:
        self.id = id
        self.name = name
        self.category = category
        self.config = config if config is not None else CheckerConfig()

    def execute(
        self, repo_ctx: RepositoryContext, check_fn: Callable[[], CheckResult]
    ) -> CheckResult:
        """Run ``check_fn``, timing it and turning any failure into a critical result."""
        start = time.perf_counter()
        try:
            result = check_fn()
        except Exception as exc:  # a failing check becomes part of the report
            return CheckResult(
                id=self.id,
                name=self.name,
                category=self.category,
                status=HealthStatus.CRITICAL,
                duration=time.perf_counter() - start,
                timestamp=datetime.now(timezone.utc),
                repository=repo_ctx.repository.name,
                issues=[
                    Issue(
                        type="execution_error",
                        severity=Severity.CRITICAL,
                        message=str(exc),
                    )
                ],
            )

        result.id = self.id
        result.name = self.name
        result.category = self.category
        result.duration = time.perf_counter() - start
        result.timestamp = datetime.now(timezone.utc)
        result.repository = repo_ctx.repository.name
        return result

    def supports_repository(self, repo: Repository) -> bool:
        return True


class ResultBuilder:
    """Fluent construction of a check result that starts out healthy."""

    def __init__(self, id: str, name: str, category: str) -> None:
        self._result = CheckResult(
            id=id,
            name=name,
            category=category,
            status=HealthStatus.HEALTHY,
            score=100,
            max_score=100,
        )

    def with_status(self, status: HealthStatus) -> ResultBuilder:
        self._result.status = status
        return self

    def with_score(self, score: int, max_score: int) -> ResultBuilder:
        self._result.score = score
        self._result.max_score = max_score
        return self

    def add_issue(self, issue: Issue) -> ResultBuilder:
        """Add an issue and raise the status according to its severity."""
        self._result.issues.append(issue)
        if issue.severity in (Severity.CRITICAL, Severity.HIGH):
            self._result.status = HealthStatus.CRITICAL
        elif issue.severity is Severity.MEDIUM and self._result.status is HealthStatus.HEALTHY:
            self._result.status = HealthStatus.WARNING
        return self

    def add_warning(self, warning: Warning) -> ResultBuilder:
        self._result.warnings.append(warning)
        if self._result.status is HealthStatus.HEALTHY:
            self._result.status = HealthStatus.WARNING
        return self

    def add_metric(self, key: str, value: Any) -> ResultBuilder:
        self._result.metrics[key] = value
        return self

    def add_metadata(self, key: str, value: str) -> ResultBuilder:
        self._result.metadata[key] = value
        return self

    def build(self) -> CheckResult:
        return self._result


def new_issue(issue_type: str, severity: Severity, message: str) -> Issue:
    return Issue(type=issue_type, severity=severity, message=message)


def new_issue_with_location(
    issue_type: str,
    severity: Severity,
    message: str,
    file: str,
    line: int,
    column: int,
) -> Issue:
    return Issue(
        type=issue_type,
        severity=severity,
        message=message,
        location=Location(file=file, line=line, column=column),
    )


def new_issue_with_suggestion(
    issue_type: str, severity: Severity, message: str, suggestion: str
) -> Issue:
    return Issue(type=issue_type, severity=severity, message=message, suggestion=suggestion)