[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "scissors"
version = "0.1.0"
description = "Rock paper scissors over WebSockets: a matchmaking game server and a terminal client"
requires-python = ">=3.10"
keywords = ["rock-paper-scissors", "websocket", "game", "multiplayer", "matchmaking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "websockets>=13",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
scissors-server = "scissors.server:main"
scissors-client = "scissors.client:main"

[tool.hatch.build.targets.wheel]
packages = ["scissors"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
