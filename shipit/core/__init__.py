"""Core domain types and logic."""

from .config import ConfigError, ConfigSnapshot, Secret, resolve
from .errors import ErrorCode
from .project import Project, ProjectFile, load_project_file
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "ConfigError",
    "ConfigSnapshot",
    "Secret",
    "resolve",
    # errors
    "ErrorCode",
    # project
    "Project",
    "ProjectFile",
    "load_project_file",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
