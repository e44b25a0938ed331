[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "coinrungen"
version = "1.0.0"
description = "Procedurally generated CoinRun platformer environment with a small entity-component-system engine"
requires-python = ">=3.10"
keywords = [
    "reinforcement-learning",
    "environment",
    "procedural-generation",
    "platformer",
    "coinrun",
    "ecs",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Side-Scrolling/Arcade Games",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
    "numpy",
    "pillow",
]

[tool.hatch.build.targets.wheel]
packages = ["coinrungen"]

[tool.hatch.build.targets.sdist]
include = [
    "coinrungen",
    "tests",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
