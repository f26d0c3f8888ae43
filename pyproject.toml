[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sleepeec"
version = "0.1.0"
description = "A small C build driver configured by a TOML build file, with its own TOML reader"
requires-python = ">=3.10"
dependencies = []
keywords = ["build", "c", "compiler", "toml"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sleepeec = "sleepeec.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["sleepeec"]

[tool.pytest.ini_options]
addopts = "-ra"
