[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mediacodecs"
version = "0.1.0"
description = "Parsers and utilities for AC-3, AV1, H.264 and H.265 bitstreams"
requires-python = ">=3.10"
dependencies = []
keywords = ["h264", "h265", "hevc", "av1", "ac3", "sps", "pps", "annexb", "avcc", "dts", "bitstream", "exp-golomb"]
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
    "Topic :: Multimedia :: Video",
    "Topic :: Multimedia :: Sound/Audio",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mediacodecs"]

[tool.pytest.ini_options]
addopts = "-ra"
