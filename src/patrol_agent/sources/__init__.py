"""Collaborator implementations used by the patrol agent."""

from .file import FileAuthoritativeCache, FileClusterState, FileTenantRegistry  # noqa: F401
from .queue import LoggingUpwardQueue  # noqa: F401

__all__ = [
    "FileAuthoritativeCache",
    "FileClusterState",
    "FileTenantRegistry",
    "LoggingUpwardQueue",
]
