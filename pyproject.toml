[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "reviewhound"
version = "0.1.0"
description = "Post linter and compiler findings as Gerrit reviews, Bitbucket Code Insights reports and GitHub Actions annotations"
requires-python = ">=3.10"
dependencies = [
    "requests",
]
keywords = [
    "code review",
    "linter",
    "annotations",
    "gerrit",
    "bitbucket",
    "code insights",
    "github actions",
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
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["reviewhound"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
