[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "trunk"
version = "0.16.0"
description = "Layered configuration, build hooks, dist management and a clean command for bundling a WASM web application."
requires-python = ">=3.11"
dependencies = []
keywords = ["wasm", "bundler", "web", "build-tool", "configuration"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
trunk = "trunk.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["trunk"]

[tool.pytest.ini_options]
addopts = "-ra"
