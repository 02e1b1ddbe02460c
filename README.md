# repohealth

`repohealth` inspects a source repository and reports on its health. It has
two parts:

* **Checkers** look at the repository as a whole: git working-tree state,
  how recently it was committed to, branch protection and CI/CD
  configuration. Each checker returns a `CheckResult` with a status, a score
  out of 100, issues, warnings and metrics.
* **Analyzers** read the source code of one language and report functions,
  imports, classes (Java) and an estimate of each function's cyclomatic
  complexity. Python and Java are supported.

The package has no runtime dependencies outside the standard library. The git
checkers and the branch-protection checker call the `git` executable; the
branch-protection checker also uses the GitHub CLI `gh` when it is installed.

## Data types

`repohealth.models` holds the shared dataclasses and enums:

* `Repository(name, path, language)` and `RepositoryContext(repository)`
  describe what is checked.
* `CheckResult` has `id`, `name`, `category`, `status` (a `HealthStatus`:
  `HEALTHY`, `WARNING`, `CRITICAL`, `UNKNOWN`), `score`, `max_score`,
  `issues`, `warnings`, `metrics`, `metadata`, `duration` (seconds),
  `timestamp` and `repository`.
* `Issue` carries a `type`, a `Severity` (`LOW`, `MEDIUM`, `HIGH`,
  `CRITICAL`), a `message`, an optional `Location` and a `suggestion`;
  `Warning` carries a `type` and a `message`.
* `CheckerConfig` holds `enabled`, `severity`, `timeout` (seconds),
  `categories` and `options`.
* `AnalysisResult`, `FileAnalysis`, `FunctionInfo`, `ImportInfo`,
  `ClassInfo` and `FieldInfo` describe what an analyzer found;
  `AnalyzerConfig` holds analyzer settings, and `AnalysisCancelled` is raised
  when an analysis is stopped.

## Running the health checks

```python
from repohealth.models import Repository, RepositoryContext
from repohealth.checkers.commands import CommandExecutor
from repohealth.checkers.git import GitStatusChecker, LastCommitChecker
from repohealth.checkers.branch_protection import BranchProtectionChecker
from repohealth.checkers.ci import CIConfigChecker

executor = CommandExecutor(timeout=30)
repo_ctx = RepositoryContext(repository=Repository(name="my-project", path="/path/to/my-project"))

checkers = [
    GitStatusChecker(executor),
    LastCommitChecker(executor),
    BranchProtectionChecker(executor),
    CIConfigChecker(),
]

for checker in checkers:
    if not checker.supports_repository(repo_ctx.repository):
        continue
    result = checker.check(repo_ctx)
    print(f"{result.name}: {result.status.value} ({result.score}/{result.max_score})")
    for issue in result.issues:
        print(f"  - {issue.message}")
```

What each checker does:

| Checker | ID | What it rates |
| --- | --- | --- |
| `GitStatusChecker` | `git-status` | Uncommitted changes from `git status --porcelain`; lists up to five changed files in the metrics. |
| `LastCommitChecker` | `git-last-commit` | Days since the last commit: up to 7 scores 100, up to 30 scores 80, up to 90 scores 60 with a warning, older scores 30 with a high-severity issue. |
| `BranchProtectionChecker` | `branch-protection` | GitHub branch protection (via `gh`), local protection config files, files such as `.github/CODEOWNERS`, and merge commits on the default branch. |
| `CIConfigChecker` | `ci-config` | CI files for GitHub Actions, Travis CI, CircleCI, GitLab CI, Jenkins, Azure Pipelines and Buildkite, and whether they test, build, deploy, and run on the main branch and on pull requests. |

A check never raises: if it fails, `BaseChecker.execute` returns a critical
result with an `execution_error` issue holding the error message.

Some pieces are useful on their own, for example
`repohealth.checkers.git.parse_git_status`,
`repohealth.checkers.ci.find_ci_configs`,
`repohealth.checkers.branch_protection.protection_indicators` and
`BranchProtectionChecker.default_branch`, which raises `LookupError` when no
default branch can be found.

### Writing a checker

Subclass `BaseChecker` and build the result with `ResultBuilder`. The builder
starts healthy with a score of 100; adding a medium-severity issue or a
warning turns it to warning, a high or critical issue turns it critical.

```python
from repohealth.checkers.base import BaseChecker, ResultBuilder, new_issue_with_suggestion
from repohealth.models import CheckerConfig, Severity
import os

class ChangelogChecker(BaseChecker):
    def __init__(self):
        super().__init__("changelog", "Changelog", "documentation", CheckerConfig())

    def check(self, repo_ctx):
        return self.execute(repo_ctx, lambda: self._check(repo_ctx))

    def _check(self, repo_ctx):
        builder = ResultBuilder(self.id, self.name, self.category)
        if not os.path.exists(os.path.join(repo_ctx.repository.path, "CHANGELOG.md")):
            builder.with_score(50, 100).add_issue(
                new_issue_with_suggestion(
                    "no_changelog", Severity.MEDIUM, "No changelog", "Add CHANGELOG.md"
                )
            )
        return builder.build()
```

### Running programs

`CommandExecutor(timeout)` runs programs with `execute(name, *args)` or
`execute_in_dir(directory, name, *args)` and returns a `CommandResult` with
`stdout`, `stderr`, `exit_code` and `error` (`None` on success, otherwise a
message for a non-zero exit, a timeout or a program that could not be
started).

## Analysing source code

```python
import logging
import threading

from repohealth.models import AnalyzerConfig, Repository
from repohealth.analyzers.python import PythonAnalyzer
from repohealth.analyzers.java import JavaAnalyzer

logger = logging.getLogger("repohealth")
repo = Repository(name="my-project", path="/path/to/my-project")

for analyzer in (PythonAnalyzer(logger), JavaAnalyzer(logger)):
    if analyzer.can_analyze(repo):
        result = analyzer.analyze(repo.path, AnalyzerConfig(), threading.Event())
        print(result.language, result.metrics["total_functions"], result.metrics["max_complexity"])
```

`analyze` reports `total_files`, `total_functions`, `total_complexity`,
`max_complexity` and `average_complexity`; the Java analyzer adds
`total_classes`. Files that cannot be read are logged and skipped. Setting the
event passed to `analyze` stops the analysis between files and raises
`AnalysisCancelled`.

Each analyzer also offers `find_files(repo_path)`, `analyze_file(path)`,
`parse(content, file_path)` and `line_complexity(line)`. Complexity is
estimated line by line from keywords (`if`, loops, `case`, `catch`/`except`,
logical operators and the like), not from a full parse. Python functions are
delimited by indentation, Java methods and classes by brace nesting.

The Python analyzer skips paths containing `.venv/`, `__pycache__/`, `.git/`,
`venv/`, `env/` or `.pytest_cache/`; the Java analyzer skips `target/`,
`build/`, `.git/`, `bin/` and `out/`.

## What the package does not do

* There is no command-line program and no single call that runs every checker
  or every analyzer; you create the checkers and analyzers you want and run
  them yourself, as shown above.
* There is no check of licence files or of README quality, and no scan of
  dependencies for known vulnerabilities.
* Only Python and Java source is analysed; Go, JavaScript and TypeScript
  files are not.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.