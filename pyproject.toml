[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "repohealth"
version = "0.1.0"
description = "Repository health checks and line-based code complexity analysis"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "repository",
    "health",
    "code-quality",
    "static-analysis",
    "complexity",
    "git",
    "ci",
    "branch-protection",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["repohealth"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
