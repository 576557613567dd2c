"""Client-side orchestration of long-running document base jobs."""

__version__ = "0.1.0"
