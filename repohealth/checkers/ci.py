"""Checks that a repository has CI/CD configuration and rates its quality."""

from __future__ import annotations

import os
from dataclasses import dataclass

from repohealth.checkers.base import BaseChecker, ResultBuilder, new_issue_with_suggestion
from repohealth.models import (
    CheckerConfig,
    CheckResult,
    HealthStatus,
    Issue,
    Repository,
    RepositoryContext,
    Severity,
    Warning,
)

_PROVIDER_FILES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Travis CI", (".travis.yml", ".travis.yaml")),
    ("CircleCI", (".circleci/config.yml", ".circleci/config.yaml")),
    ("GitLab CI", (".gitlab-ci.yml", ".gitlab-ci.yaml")),
    ("Jenkins", ("Jenkinsfile", "jenkins.yml", "jenkins.yaml")),
    ("Azure Pipelines", ("azure-pipelines.yml", "azure-pipelines.yaml", ".azure/pipelines.yml")),
    ("Buildkite", (".buildkite",)),
)

_FEATURE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "caching": ("cache", "cached"),
    "matrix_builds": ("matrix", "strategy"),
    "parallel_jobs": ("parallel", "concurrent"),
    "artifacts": ("artifact", "upload"),
    "notifications": ("notify", "notification", "slack", "email"),
    "environment_variables": ("env:", "environment"),
    "secrets": ("secret", "encrypted"),
    "docker": ("docker", "container", "image"),
}

_TEST_KEYWORDS = ("test", "spec", "check", "verify", "coverage", "junit", "pytest", "jest", "mocha")
_BUILD_KEYWORDS = (
    "build", "compile", "make", "gradle", "maven", "npm run build", "go build", "cargo build",
)
_DEPLOY_KEYWORDS = ("deploy", "release", "publish", "docker push", "helm", "kubectl")
_MAIN_BRANCH_KEYWORDS = ("main", "master")
_PR_KEYWORDS = ("pull_request", "merge_request", "pr:", "mr:")
_STATUS_KEYWORDS = ("status", "check", "badge")

_MIN_CONFIG_BYTES = 50


@dataclass(frozen=True)
class CIConfig:
    """A CI configuration file, relative to the repository root, and its provider."""

    path: str
    type: str


def find_ci_configs(repo_path: str) -> list[CIConfig]:
    """All CI configuration files of the known providers present in the repository."""
    configs: list[CIConfig] = []

    workflows = os.path.join(repo_path, ".github", "workflows")
    try:
        with os.scandir(workflows) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError:
        entries = []
    for entry in entries:
        if not entry.is_dir(follow_symlinks=False) and entry.name.endswith((".yml", ".yaml")):
            configs.append(
                CIConfig(os.path.join(".github", "workflows", entry.name), "GitHub Actions")
            )

    for provider, names in _PROVIDER_FILES:
        configs.extend(
            CIConfig(name, provider)
            for name in names
            if os.path.exists(os.path.join(repo_path, name))
        )
    return configs


def _contains_any(content: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in content for keyword in keywords)


def ci_features(content: str) -> list[str]:
    """Names of the CI features mentioned in lower-cased configuration text."""
    return [
        feature
        for feature, keywords in _FEATURE_KEYWORDS.items()
        if _contains_any(content, keywords)
    ]


def has_testing_config(content: str) -> bool:
    return _contains_any(content, _TEST_KEYWORDS)


def has_build_config(content: str) -> bool:
    return _contains_any(content, _BUILD_KEYWORDS)


def has_deployment_config(content: str) -> bool:
    return _contains_any(content, _DEPLOY_KEYWORDS)


def _read_lower(repo_path: str, config: CIConfig) -> str | None:
    try:
        with open(os.path.join(repo_path, config.path), "rb") as handle:
            return handle.read().decode("utf-8", errors="replace").lower()
    except OSError:
        return None


def _any_config_mentions(
    repo_path: str, configs: list[CIConfig], keywords: tuple[str, ...]
) -> bool:
    for config in configs:
        content = _read_lower(repo_path, config)
        if content is not None and _contains_any(content, keywords):
            return True
    return False


def _analyze_config(
    repo_path: str, config: CIConfig
) -> tuple[int, list[Issue], list[Warning]]:
    issues: list[Issue] = []
    warnings: list[Warning] = []
    try:
        with open(os.path.join(repo_path, config.path), "rb") as handle:
            raw = handle.read()
    except OSError as exc:
        issues.append(
            new_issue_with_suggestion(
                "ci_config_read_error",
                Severity.MEDIUM,
                f"Unable to read CI config {config.path}: {exc}",
                "Check file permissions and ensure the CI configuration file is accessible",
            )
        )
        return 0, issues, warnings

    content = raw.decode("utf-8", errors="replace").lower()
    score = len(ci_features(content)) * 5

    if has_testing_config(content):
        score += 20
    else:
        warnings.append(
            Warning(
                type="no_testing_in_ci",
                message=f"CI configuration {config.path} lacks testing steps",
            )
        )

    if has_build_config(content):
        score += 15
    else:
        warnings.append(
            Warning(
                type="no_build_in_ci",
                message=f"CI configuration {config.path} lacks build steps",
            )
        )

    if has_deployment_config(content):
        score += 10

    if len(raw) < _MIN_CONFIG_BYTES:
        issues.append(
            new_issue_with_suggestion(
                "ci_config_too_short",
                Severity.MEDIUM,
                f"CI configuration {config.path} is very short and may be incomplete",
                "Ensure the CI configuration includes necessary steps for testing and building",
            )
        )
    return score, issues, warnings


def _best_practices(repo_path: str, configs: list[CIConfig]) -> tuple[int, list[Warning]]:
    warnings: list[Warning] = []
    score = 0
    if _any_config_mentions(repo_path, configs, _MAIN_BRANCH_KEYWORDS):
        score += 10
    else:
        warnings.append(
            Warning(
                type="no_main_branch_ci",
                message="CI doesn't appear to run on main branch protection",
            )
        )
    if _any_config_mentions(repo_path, configs, _PR_KEYWORDS):
        score += 10
    else:
        warnings.append(
            Warning(type="no_pr_checks", message="CI doesn't appear to run on pull requests")
        )
    if _any_config_mentions(repo_path, configs, _STATUS_KEYWORDS):
        score += 5
    return score, warnings


def _analyze_configs(
    repo_path: str, configs: list[CIConfig]
) -> tuple[int, list[Issue], list[Warning]]:
    issues: list[Issue] = []
    warnings: list[Warning] = []
    score = 40
    if len(configs) > 1:
        score += 10

    for config in configs:
        config_score, config_issues, config_warnings = _analyze_config(repo_path, config)
        score += config_score // len(configs)
        issues.extend(config_issues)
        warnings.extend(config_warnings)

    practice_score, practice_warnings = _best_practices(repo_path, configs)
    score += practice_score
    warnings.extend(practice_warnings)
    return max(0, min(100, score)), issues, warnings


class CIConfigChecker(BaseChecker):
    """Looks for CI/CD configuration and rates what it covers."""

    def __init__(self) -> None:
        super().__init__(
            "ci-config",
            "CI/CD Configuration",
            "ci",
            CheckerConfig(
                enabled=True, severity="medium", timeout=30.0, categories=["ci", "automation"]
            ),
        )

    def check(self, repo_ctx: RepositoryContext) -> CheckResult:
        return self.execute(repo_ctx, lambda: self._check_ci_config(repo_ctx))

    def _check_ci_config(self, repo_ctx: RepositoryContext) -> CheckResult:
        builder = ResultBuilder(self.id, self.name, self.category)
        repo_path = repo_ctx.repository.path

        configs = find_ci_configs(repo_path)
        builder.add_metric("ci_configs_found", len(configs))
        if not configs:
            builder.with_status(HealthStatus.WARNING).with_score(30, 100)
            builder.add_issue(
                new_issue_with_suggestion(
                    "no_ci_config",
                    Severity.MEDIUM,
                    "No CI/CD configuration found",
                    "Add CI/CD configuration (e.g., GitHub Actions, Travis CI, Jenkins) "
                    "to automate testing and deployment",
                )
            )
            return builder.build()

        score, issues, warnings = _analyze_configs(repo_path, configs)
        builder.with_score(score, 100)
        for index, config in enumerate(configs):
            builder.add_metric(f"ci_config_{index}", config.path)
            builder.add_metric(f"ci_type_{index}", config.type)
        for issue in issues:
            builder.add_issue(issue)
        for warning in warnings:
            builder.add_warning(warning)

        if score >= 80:
            builder.with_status(HealthStatus.HEALTHY)
        elif score >= 50:
            builder.with_status(HealthStatus.WARNING)
        else:
            builder.with_status(HealthStatus.CRITICAL)
        return builder.build()

    def supports_repository(self, repo: Repository) -> bool:
        return True