[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pdroute"
version = "0.4.2"
description = "Tabu and simple local-search optimizers for pickup-and-delivery vehicle routing"
requires-python = ">=3.10"
dependencies = []
keywords = ["vehicle routing", "pickup and delivery", "tabu search", "local search", "vrp"]
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
    "Topic :: Scientific/Engineering :: Mathematics",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pdroute"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
