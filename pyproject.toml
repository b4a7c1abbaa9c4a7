[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mimeparts"
version = "0.1.0"
description = "Building blocks for MIME mail headers: lexing, address, parameter and date parsing, RFC 2047/2231 encoding and content analysis"
requires-python = ">=3.10"
dependencies = []
keywords = ["mime", "email", "rfc2047", "rfc2231", "rfc2822", "headers", "parsing"]
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
    "Topic :: Communications :: Email",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mimeparts"]

[tool.hatch.build.targets.sdist]
include = ["mimeparts", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
