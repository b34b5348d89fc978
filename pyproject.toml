[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gofar"
version = "2.4.0"
description = "Build Go command binaries for several platforms and package them with their resources into a .far artifact"
requires-python = ">=3.10"
keywords = ["go", "packaging", "build", "artifact", "far", "cross-compile"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
gofar = "gofar.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gofar"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
