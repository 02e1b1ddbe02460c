"""Checks of git working-tree state and commit freshness."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from datetime import datetime

from repohealth.checkers.base import BaseChecker, ResultBuilder, new_issue_with_suggestion
from repohealth.checkers.commands import CommandExecutor
from repohealth.models import (
    CheckerConfig,
    CheckResult,
    HealthStatus,
    Location,
    Repository,
    RepositoryContext,
    Severity,
    Warning,
)

_MAX_LISTED_FILES = 5

_STATUS_DESCRIPTIONS = {
    "??": "untracked",
    " M": "modified",
    "M ": "modified (staged)",
    "MM": "modified (staged and unstaged)",
    " A": "added",
    "A ": "added (staged)",
    " D": "deleted",
    "D ": "deleted (staged)",
    "R ": "renamed",
    "C ": "copied",
}


@dataclass(frozen=True)
class GitFile:
    """A file reported by ``git status --porcelain``."""

    name: str
    status: str


def describe_status(code: str) -> str:
    """Turn a two-letter porcelain status code into words."""
    return _STATUS_DESCRIPTIONS.get(code, code.strip())


def parse_git_status(lines: list[str]) -> list[GitFile]:
    """Parse porcelain status lines, skipping any shorter than three characters."""
    return [
        GitFile(name=line[3:], status=describe_status(line[:2]))
        for line in lines
        if len(line) >= 3
    ]


def _inside_work_tree(executor: CommandExecutor, path: str) -> bool:
    result = executor.execute_in_dir(path, "git", "rev-parse", "--is-inside-work-tree")
    return result.error is None and result.stdout.strip() == "true"


class LastCommitChecker(BaseChecker):
    """Rates a repository by how long ago its last commit was made."""

    def __init__(self, executor: CommandExecutor) -> None:
        super().__init__(
            "git-last-commit",
            "Last Commit",
            "git",
            CheckerConfig(enabled=True, severity="low", timeout=30.0, categories=["git"]),
        )
        self.executor = executor

    def check(self, repo_ctx: RepositoryContext) -> CheckResult:
        return self.execute(repo_ctx, lambda: self._check_last_commit(repo_ctx))

    def _check_last_commit(self, repo_ctx: RepositoryContext) -> CheckResult:
        builder = ResultBuilder(self.id, self.name, self.category)
        path = repo_ctx.repository.path

        if not _inside_work_tree(self.executor, path):
            builder.with_status(HealthStatus.WARNING)
            builder.add_warning(Warning(type="not_git_repo", message="Not a git repository"))
            return builder.build()

        result = self.executor.execute_in_dir(path, "git", "log", "-1", "--format=%ct")
        if result.error is not None or not result.stdout:
            builder.with_status(HealthStatus.WARNING)
            builder.add_warning(
                Warning(
                    type="git_command_error",
                    message=f"Unable to get last commit date: {result.error}",
                )
            )
            return builder.build()

        try:
            timestamp = int(result.stdout.strip())
        except ValueError as exc:
            builder.with_status(HealthStatus.WARNING)
            builder.add_warning(
                Warning(type="parse_error", message=f"Unable to parse commit timestamp: {exc}")
            )
            return builder.build()

        days_since = int((time.time() - timestamp) / 3600 / 24)
        builder.add_metric("last_commit_timestamp", timestamp)
        builder.add_metric(
            "last_commit_date", datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")
        )
        builder.add_metric("days_since_last_commit", days_since)

        if days_since <= 7:
            builder.with_status(HealthStatus.HEALTHY).with_score(100, 100)
            builder.add_metric("freshness", "excellent")
        elif days_since <= 30:
            builder.with_status(HealthStatus.HEALTHY).with_score(80, 100)
            builder.add_metric("freshness", "good")
        elif days_since <= 90:
            builder.with_status(HealthStatus.WARNING).with_score(60, 100)
            builder.add_metric("freshness", "moderate")
            builder.add_warning(
                Warning(
                    type="stale_repository",
                    message=f"Repository has not been updated for {days_since} days",
                )
            )
        else:
            builder.with_status(HealthStatus.CRITICAL).with_score(30, 100)
            builder.add_metric("freshness", "stale")
            builder.add_issue(
                new_issue_with_suggestion(
                    "very_stale_repository",
                    Severity.HIGH,
                    f"Repository has not been updated for {days_since} days",
                    "Consider updating the repository or archiving if no longer maintained",
                )
            )
        return builder.build()

    def supports_repository(self, repo: Repository) -> bool:
        return _inside_work_tree(self.executor, repo.path)


class GitStatusChecker(BaseChecker):
    """Reports uncommitted changes in the working tree."""

    def __init__(self, executor: CommandExecutor) -> None:
        super().__init__(
            "git-status",
            "Git Status",
            "git",
            CheckerConfig(enabled=True, severity="medium", timeout=30.0, categories=["git"]),
        )
        self.executor = executor

    def check(self, repo_ctx: RepositoryContext) -> CheckResult:
        return self.execute(repo_ctx, lambda: self._check_git_status(repo_ctx))

    def _check_git_status(self, repo_ctx: RepositoryContext) -> CheckResult:
        builder = ResultBuilder(self.id, self.name, self.category)
        path = repo_ctx.repository.path

        if not self._is_git_repository(path):
            builder.with_status(HealthStatus.CRITICAL)
            issue = new_issue_with_suggestion(
                "not_git_repo",
                Severity.CRITICAL,
                "Not a git repository",
                "Initialize git repository with 'git init' or check if this is the correct path",
            )
            issue.location = Location(file=path)
            builder.add_issue(issue)
            return builder.build()

        result = self.executor.execute_in_dir(path, "git", "status", "--porcelain")
        if result.error is not None:
            builder.with_status(HealthStatus.WARNING)
            builder.add_warning(
                Warning(
                    type="git_command_error",
                    message=f"Unable to check git status: {result.error}",
                )
            )
            return builder.build()

        lines = result.stdout.strip().split("\n")
        if lines == [""]:
            builder.with_status(HealthStatus.HEALTHY).with_score(100, 100)
            builder.add_metric("uncommitted_files", 0)
            builder.add_metric("status", "clean")
            return builder.build()

        builder.with_status(HealthStatus.WARNING).with_score(70, 100)
        files = parse_git_status(lines)
        builder.add_metric("uncommitted_files", len(files))
        builder.add_metric("status", "dirty")
        builder.add_issue(
            new_issue_with_suggestion(
                "uncommitted_changes",
                Severity.MEDIUM,
                f"Repository has {len(files)} uncommitted changes",
                "Review and commit changes with 'git add' and 'git commit', "
                "or stash them with 'git stash'",
            )
        )
        for index, git_file in enumerate(files):
            if index >= _MAX_LISTED_FILES:
                builder.add_metric(
                    f"file_{index}", f"... and {len(files) - _MAX_LISTED_FILES} more"
                )
                break
            builder.add_metric(f"file_{index}", f"{git_file.name} ({git_file.status})")
        return builder.build()

    def _is_git_repository(self, path: str) -> bool:
        if os.path.exists(os.path.join(path, ".git")):
            return True
        result = self.executor.execute_in_dir(path, "git", "rev-parse", "--is-inside-work-tree")
        return result.error is None

    def supports_repository(self, repo: Repository) -> bool:
        return self._is_git_repository(repo.path)