[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mixinkit"
version = "0.1.0"
description = "Mixin Network kernel primitives: keys, ghost keys, transaction encoding, RPC client and messenger helpers"
requires-python = ">=3.10"
keywords = ["mixin", "blockchain", "ed25519", "transaction", "utxo", "nft", "blake3"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "msgpack",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mixinkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
