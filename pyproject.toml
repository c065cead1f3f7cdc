[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "quillbook"
version = "0.1.0"
description = "Parse SUMMARY.md outlines and load Markdown books into a chapter tree"
requires-python = ">=3.10"
keywords = ["markdown", "book", "documentation", "summary", "chapters"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Documentation",
    "Topic :: Text Processing :: Markup :: Markdown",
]
dependencies = [
    "markdown-it-py",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["quillbook"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
