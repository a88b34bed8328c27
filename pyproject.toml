[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rpnssa"
version = "0.1.0"
description = "An interactive reverse Polish notation calculator with SSA-style variables and simple control-flow words"
requires-python = ">=3.10"
keywords = ["rpn", "calculator", "interpreter", "ssa", "stack-machine"]
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
    "Topic :: Software Development :: Interpreters",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rpnssa = "rpnssa.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["rpnssa"]

[tool.pytest.ini_options]
addopts = "-ra"
