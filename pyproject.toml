[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wsframes"
version = "0.17.2"
description = "Lightweight stream-based WebSocket framing and message protocol"
requires-python = ">=3.10"
dependencies = []
keywords = ["websocket", "rfc6455", "io", "web", "protocol", "framing"]
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
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["wsframes"]

[tool.hatch.build.targets.sdist]
include = ["wsframes", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
