[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "plugsdk"
version = "0.1.0"
description = "Building blocks for deployment plugins: component interfaces, configuration, documentation, data directories and terminal helpers"
requires-python = ">=3.10"
keywords = ["plugin", "sdk", "deployment", "components", "documentation", "spinner", "pty"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]
dependencies = [
    "protobuf",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["plugsdk"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
