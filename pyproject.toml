[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fvmem"
version = "0.1.0"
description = "A simulated block-based memory pool with in-band allocation headers and reference-counted pointers"
requires-python = ">=3.10"
dependencies = []
keywords = ["memory", "pool", "allocator", "reference counting", "simulation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
fvmem = "fvmem.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["fvmem"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
