"""Platform layer: subprocess execution."""

from .process import CommandRunner, ProcessError, run, run_silent

__all__ = ["CommandRunner", "ProcessError", "run", "run_silent"]
