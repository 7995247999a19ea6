[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "panalign"
version = "0.1.0"
description = "Building blocks for pangenome read alignment: MEM chaining, CIGAR and MD handling, SAM output and FASTA/FASTQ utilities"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "bioinformatics",
    "alignment",
    "pangenome",
    "chaining",
    "MEM",
    "SAM",
    "CIGAR",
    "FASTA",
    "FASTQ",
    "matching statistics",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
panalign-split-fa = "panalign.fastx:main"

[tool.hatch.build.targets.wheel]
packages = ["panalign"]

[tool.hatch.build.targets.sdist]
include = ["panalign", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
