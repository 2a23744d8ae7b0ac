[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kazuka"
version = "0.1.0"
description = "Event-driven engine for on-chain trading bots: event sources, strategies and executors wired together with asyncio."
requires-python = ">=3.11"
dependencies = []
keywords = ["ethereum", "mev", "trading", "bot", "asyncio", "blockchain"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
kazuka = "kazuka.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["kazuka"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
strict = true
