[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vcmiextract"
version = "1.0.0"
description = "Extract resources from Heroes of Might and Magic III archives (LOD, SND, VID, DEF, PAK) into plain files and PNG images"
requires-python = ">=3.10"
dependencies = []
keywords = ["heroes3", "lod", "def", "pcx", "dds", "png", "extractor", "game-assets"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: System :: Archiving",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
vcmiextract = "vcmiextract.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["vcmiextract"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
