[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gptdisk"
version = "0.1.0"
description = "Read and write GPT headers, protective MBRs and mixed-endian GUIDs through a block IO interface"
requires-python = ">=3.10"
dependencies = []
keywords = ["gpt", "guid", "mbr", "disk", "uefi", "block-device", "crc32"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
guid-info = "gptdisk.guid_info:main"

[tool.hatch.build.targets.wheel]
packages = ["gptdisk"]

[tool.pytest.ini_options]
addopts = "-ra"
