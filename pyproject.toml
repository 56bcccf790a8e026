[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hypervkit"
version = "0.1.0"
description = "Hyper-V resource helpers: input validators and lifecycle logic for virtual hard disks, ISO images and virtual network switches."
requires-python = ">=3.10"
dependencies = []
keywords = ["hyper-v", "vhd", "iso", "virtual-switch", "infrastructure", "validation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hypervkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
