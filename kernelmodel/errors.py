"""
Error taxonomy for the kernel performance model.

Parsing and merge errors (SourceUnavailableError, UnknownFieldError,
UnmatchedKeyError) are recoverable: the loader logs them and keeps going.
SingularSystemError and EmptyDatasetError are fatal to the fit and
evaluation steps and propagate to the driver.
"""


class KernelModelError(Exception):
    """Base class for every error raised by kernelmodel."""


class SourceUnavailableError(KernelModelError):
    """A source file could not be opened or decoded."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Source {path} is unavailable: {reason}")


class UnknownFieldError(KernelModelError):
    """A config key outside the recognised field set."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unrecognized config field: {name!r}")


class UnmatchedKeyError(KernelModelError):
    """A measurement entry whose kernel has no config-created record."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"No kernel config for {identifier!r}")


class SingularSystemError(KernelModelError):
    """The normal equations have no unique solution."""


class EmptyDatasetError(KernelModelError):
    """An operation that needs records was given an empty store."""
