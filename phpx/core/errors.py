"""
Error taxonomy for phpx.

Every failure that should stop an invocation with a single diagnostic
line derives from ``PhpxError``.  ``ExecutionExit`` is not a
``PhpxError``: it carries the child tool's exit status through the
call stack so the CLI can exit with it verbatim and print nothing.
"""

from __future__ import annotations


class PhpxError(Exception):
    """Base class for all phpx application errors."""


class ConfigError(PhpxError):
    """Raised when configuration is malformed or cannot be written."""


class InvalidToolIdentifierError(PhpxError):
    """Raised when a tool identifier cannot be parsed."""


class ToolNotFoundError(PhpxError):
    """Raised when every resolver stage is exhausted."""


class VersionConstraintError(PhpxError):
    """Raised when no published version satisfies the request."""


class SecurityError(PhpxError):
    """Raised on a hash or checksum mismatch."""


class CacheError(PhpxError):
    """Raised when a cache entry's backing path is missing or invalid."""


class InstallerError(PhpxError):
    """Raised when an isolated Composer install fails."""


class ExecutionError(PhpxError):
    """Raised when no usable PHP interpreter can be found."""


class NetworkError(PhpxError):
    """Raised when an HTTP request fails."""


class ExecutionExit(Exception):
    """The executed tool exited non-zero.

    Not an application error: the status is propagated unchanged as the
    process exit code and nothing extra is printed.
    """

    def __init__(self, code: int) -> None:
        super().__init__(f"Tool exited with status {code}")
        self.code = code
