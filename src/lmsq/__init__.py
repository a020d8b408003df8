"""Core package for the lmsq project."""

from .core.models import (
    CliError,
    Column,
    ErrorKind,
    OutputMode,
    OutputOptions,
)

__version__ = "0.1.0"

__all__ = [
    "CliError",
    "Column",
    "ErrorKind",
    "OutputMode",
    "OutputOptions",
    "__version__",
]
