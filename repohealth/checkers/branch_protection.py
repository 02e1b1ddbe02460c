"""Checks how well the default branch of a git repository is protected."""

from __future__ import annotations

import os

from repohealth.checkers.base import BaseChecker, ResultBuilder, new_issue_with_suggestion
from repohealth.checkers.commands import CommandExecutor
from repohealth.models import (
    CheckerConfig,
    CheckResult,
    HealthStatus,
    Repository,
    RepositoryContext,
    Severity,
    Warning,
)

_LOCAL_CONFIG_FILES = (
    ".github/branch-protection.yml",
    ".github/branch-protection.yaml",
    ".github/workflows/branch-protection.yml",
    ".github/workflows/branch-protection.yaml",
)

_PROTECTION_INDICATOR_FILES = (
    ".github/CODEOWNERS",
    ".github/pull_request_template.md",
    ".github/workflows/ci.yml",
    ".github/workflows/ci.yaml",
    ".github/workflows/test.yml",
    ".github/workflows/test.yaml",
)

_FALLBACK_BRANCHES = ("main", "master", "develop")
_REMOTE_HEAD_PREFIX = "refs/remotes/origin/"


def has_local_protection_config(repo_path: str) -> bool:
    """Whether the repository carries a branch protection configuration file."""
    return any(os.path.exists(os.path.join(repo_path, name)) for name in _LOCAL_CONFIG_FILES)


def protection_indicators(repo_path: str) -> list[str]:
    """Files that show the project works with reviews and required checks."""
    return [
        name
        for name in _PROTECTION_INDICATOR_FILES
        if os.path.exists(os.path.join(repo_path, name))
    ]


class BranchProtectionChecker(BaseChecker):
    """Rates branch protection from GitHub settings, local files and merge history."""

    def __init__(self, executor: CommandExecutor) -> None:
        super().__init__(
            "branch-protection",
            "Branch Protection",
            "security",
            CheckerConfig(enabled=True, severity="high", timeout=30.0, categories=["security"]),
        )
        self.executor = executor

    def check(self, repo_ctx: RepositoryContext) -> CheckResult:
        return self.execute(repo_ctx, lambda: self._check_branch_protection(repo_ctx))

    def supports_repository(self, repo: Repository) -> bool:
        return self._is_git_repository(repo.path)

    def _is_git_repository(self, path: str) -> bool:
        result = self.executor.execute_in_dir(path, "git", "rev-parse", "--is-inside-work-tree")
        return result.error is None and result.stdout.strip() == "true"

    def default_branch(self, repo_path: str) -> str:
        """The default branch; raises LookupError when it cannot be determined."""
        result = self.executor.execute_in_dir(
            repo_path, "git", "symbolic-ref", "refs/remotes/origin/HEAD"
        )
        if result.error is None and result.stdout:
            branch = result.stdout.strip().removeprefix(_REMOTE_HEAD_PREFIX)
            if branch:
                return branch

        for branch in _FALLBACK_BRANCHES:
            result = self.executor.execute_in_dir(
                repo_path, "git", "show-ref", "--verify", "--quiet", f"refs/heads/{branch}"
            )
            if result.error is None:
                return branch
        raise LookupError("unable to determine default branch")

    def _github_protection(self, repo_path: str, branch: str) -> tuple[bool, str | None]:
        if self.executor.execute("which", "gh").error is not None:
            return False, "GitHub CLI not available"
        result = self.executor.execute_in_dir(
            repo_path, "gh", "api", f"repos/:owner/:repo/branches/{branch}/protection"
        )
        if result.error is not None:
            return False, result.error
        output = result.stdout.strip()
        return bool(output) and "Branch not protected" not in output, None

    def _has_merge_patterns(self, repo_path: str, branch: str) -> bool:
        result = self.executor.execute_in_dir(
            repo_path, "git", "log", "--oneline", "--merges", "-10", branch
        )
        return result.error is None and bool(result.stdout.strip())

    def _check_branch_protection(self, repo_ctx: RepositoryContext) -> CheckResult:
        builder = ResultBuilder(self.id, self.name, self.category)
        repo_path = repo_ctx.repository.path

        if not self._is_git_repository(repo_path):
            builder.with_status(HealthStatus.CRITICAL)
            builder.add_issue(
                new_issue_with_suggestion(
                    "not_git_repo",
                    Severity.CRITICAL,
                    "Not a git repository",
                    "Initialize git repository with 'git init' or check if this is the correct path",
                )
            )
            return builder.build()

        try:
            branch = self.default_branch(repo_path)
        except LookupError as exc:
            builder.with_status(HealthStatus.WARNING)
            builder.add_warning(
                Warning(
                    type="branch_detection_error",
                    message=f"Unable to determine default branch: {exc}",
                )
            )
            branch = "main"
        builder.add_metric("default_branch", branch)

        has_local = has_local_protection_config(repo_path)
        builder.add_metric("has_local_config", has_local)

        has_github, gh_error = self._github_protection(repo_path, branch)
        builder.add_metric("has_github_protection", has_github)

        indicators = protection_indicators(repo_path)
        builder.add_metric("protection_indicators", len(indicators))

        has_merges = self._has_merge_patterns(repo_path, branch)
        builder.add_metric("has_merge_patterns", has_merges)

        self._evaluate(builder, branch, has_local, has_github, indicators, has_merges, gh_error)
        return builder.build()

    @staticmethod
    def _evaluate(
        builder: ResultBuilder,
        branch: str,
        has_local: bool,
        has_github: bool,
        indicators: list[str],
        has_merges: bool,
        gh_error: str | None,
    ) -> None:
        score = 0
        if has_github:
            score += 50
            builder.add_metric("github_protection_status", "enabled")
        elif gh_error is not None:
            builder.add_warning(
                Warning(
                    type="github_cli_error",
                    message=f"Unable to check GitHub protection: {gh_error}",
                )
            )
            builder.add_metric("github_protection_status", "unknown")
        else:
            builder.add_metric("github_protection_status", "disabled")

        if has_local:
            score += 20
        builder.add_metric("local_config_status", "present" if has_local else "missing")

        if indicators:
            score += 20
            builder.add_metric("protection_indicators_status", "present")
            for index, indicator in enumerate(indicators):
                builder.add_metric(f"indicator_{index}", indicator)
        else:
            builder.add_metric("protection_indicators_status", "missing")

        if has_merges:
            score += 10
        builder.add_metric("merge_patterns_status", "present" if has_merges else "missing")

        builder.with_score(score, 100)
        if score >= 70:
            builder.with_status(HealthStatus.HEALTHY)
        elif score >= 40:
            builder.with_status(HealthStatus.WARNING)
            builder.add_issue(
                new_issue_with_suggestion(
                    "incomplete_branch_protection",
                    Severity.MEDIUM,
                    f"Branch protection for '{branch}' appears incomplete",
                    "Consider enabling GitHub branch protection rules or adding local "
                    "protection configuration",
                )
            )
        else:
            builder.with_status(HealthStatus.CRITICAL)
            builder.add_issue(
                new_issue_with_suggestion(
                    "no_branch_protection",
                    Severity.HIGH,
                    f"No branch protection detected for '{branch}'",
                    "Enable GitHub branch protection rules and add CODEOWNERS file for "
                    "better security",
                )
            )