[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gcnvcs"
version = "0.1.0"
description = "A small content-addressed version control system with blobs, trees, commits and branches"
requires-python = ">=3.10"
dependencies = []
keywords = ["version-control", "vcs", "xxhash", "commits", "branches"]
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
    "Topic :: Software Development :: Version Control",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gcn = "gcnvcs.commands:main"
gcn-debug = "gcnvcs.debug:main"

[tool.hatch.build.targets.wheel]
packages = ["gcnvcs"]

[tool.pytest.ini_options]
addopts = "-ra"
