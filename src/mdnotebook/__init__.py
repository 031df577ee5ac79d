"""Block-structured markdown notebooks."""

__version__ = "0.1.0"
