[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "runnerdeck"
version = "0.1.0"
description = "Terminal dashboard for managing an organization's self-hosted GitHub Actions runners and runner groups"
requires-python = ">=3.10"
keywords = [
    "github-actions",
    "self-hosted-runners",
    "runner-groups",
    "tui",
    "terminal",
    "ci",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "httpx>=0.27",
    "blessed>=1.20",
]

[project.optional-dependencies]
test = [
    "pytest>=8.0",
    "pytest-asyncio>=0.23",
    "respx>=0.21",
]

[project.scripts]
runnerdeck = "runnerdeck.app:main"

[tool.hatch.build.targets.wheel]
packages = ["runnerdeck"]

[tool.hatch.build.targets.sdist]
include = [
    "runnerdeck",
    "tests",
    "pyproject.toml",
    "README.md",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
