"""Read and write GPT headers, protective MBRs and GUIDs through a block IO interface."""

__version__ = "0.1.0"