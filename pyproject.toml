[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zeroledger"
version = "0.1.0"
description = "Leaderless DAG consensus core for a payments ledger: Ed25519 transfers, BLAKE3 hashing, trust scoring, gossip message encoding and a bridge vault watcher"
requires-python = ">=3.10"
dependencies = [
    "pynacl",
]
keywords = ["consensus", "dag", "bft", "ed25519", "blake3", "ledger", "gossip"]
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
    "Topic :: System :: Distributed Computing",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["zeroledger"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
