[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "imagededup"
version = "0.1.0"
description = "Find, filter and clean up duplicate images from a perceptual hash database"
requires-python = ">=3.10"
dependencies = []
keywords = ["images", "duplicates", "perceptual-hash", "hamming-distance", "deduplication"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
imagededup = "imagededup.cli:main"
imagededup-check = "imagededup.check:main"

[tool.hatch.build.targets.wheel]
packages = ["imagededup"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
