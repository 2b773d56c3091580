[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "makroscales"
version = "0.1.0"
description = "Bridge between a Linx TTO line controller, a weighing PLC and a CAB label printer"
requires-python = ">=3.10"
dependencies = []
keywords = ["linx", "tto", "cab", "label printer", "plc", "weighing", "protocol bridge", "gs1"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: Manufacturing",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
makroscales = "makroscales.controller:main"

[tool.hatch.build.targets.wheel]
packages = ["makroscales"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
