"""
Fatal staging errors and the process exit codes they map to.

Only conditions that abort the whole staging run live here. Plugin-local
problems (a failed agent install, a malformed override) never surface as
one of these: the coordinator logs them and moves on.

Exit codes:
    0   staging succeeded
    1   internal error (unexpected exception)
    2   usage error (reported by click)
    10  no packaging archetype detected
    11  no Java runtime provider detected
    12  mandatory runtime provider failed to install or configure
    13  mandatory container failed to install, configure or derive a start command
    14  staging filesystem could not be written
    15  release description missing or unreadable
"""

from __future__ import annotations

EXIT_OK = 0
EXIT_INTERNAL_ERROR = 1
EXIT_USAGE = 2
EXIT_NO_ARCHETYPE = 10
EXIT_NO_RUNTIME = 11
EXIT_RUNTIME_FAILED = 12
EXIT_CONTAINER_FAILED = 13
EXIT_STAGING_WRITE_FAILED = 14
EXIT_RELEASE_MISSING = 15


class StagingError(Exception):
    """Base class for build-aborting errors."""

    exit_code: int = EXIT_INTERNAL_ERROR


class NoArchetypeError(StagingError):
    """No packaging archetype recognised the application."""

    exit_code = EXIT_NO_ARCHETYPE


class NoRuntimeError(StagingError):
    """No Java runtime provider detected."""

    exit_code = EXIT_NO_RUNTIME


class RuntimeInstallError(StagingError):
    """The selected runtime provider failed a lifecycle phase."""

    exit_code = EXIT_RUNTIME_FAILED


class ContainerError(StagingError):
    """The selected container failed a lifecycle phase or its start command."""

    exit_code = EXIT_CONTAINER_FAILED


class StagingWriteError(StagingError):
    """A file in the staging tree could not be written."""

    exit_code = EXIT_STAGING_WRITE_FAILED


class ReleaseMissingError(StagingError):
    """The release description written at the end of staging is missing."""

    exit_code = EXIT_RELEASE_MISSING
