[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chainkit"
version = "0.1.0"
description = "Ethereum data types, JSON and RLP codecs, transaction signing and log stores for event trackers"
requires-python = ">=3.10"
keywords = ["ethereum", "rlp", "secp256k1", "eip155", "bip32", "transactions", "logs"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Typing :: Typed",
]
dependencies = [
    "pycryptodome",
    "lmdb",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["chainkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
