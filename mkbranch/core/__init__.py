"""Core types: results, exit codes, settings and the repository manifest."""

from .config import ConfigError, Settings, load_settings
from .errors import ErrorCode
from .manifest import RepositorySet, RepositorySpec, load_manifest
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "ConfigError",
    "Settings",
    "load_settings",
    # errors
    "ErrorCode",
    # manifest
    "RepositorySet",
    "RepositorySpec",
    "load_manifest",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
