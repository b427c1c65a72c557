# signorm/core/exceptions.py
from __future__ import annotations


class CoreError(Exception):
    """Base error for all signorm exceptions."""


# ---- Argument errors ----
class InvalidArgument(CoreError, ValueError):
    """Raised when a caller passes a malformed argument (wrong type, shape or arity)."""


# ---- Structural errors (raised by guard clauses on failed validation) ----
class InvalidSignal(CoreError):
    """Raised when a Signal is constructed with invalid inputs."""


class InvalidSarray(CoreError):
    """Raised when an S-array fails validation."""


class InvalidSignalGroup(CoreError):
    """Raised when a SignalGroup fails validation."""


class InvalidDataset(CoreError):
    """Raised when a Dataset fails validation."""


class InvalidFileContents(CoreError, ValueError):
    """Raised when a file is of a supported type but its contents are defective."""


# ---- Lookup errors (also behave like KeyError for dict-like APIs) ----
class UnknownSourceType(CoreError, KeyError):
    """Raised when a source type is not defined by the name tables."""


InvalidSourceType = UnknownSourceType
UnsupportedSourceType = UnknownSourceType


class InvalidGroup(CoreError, KeyError):
    """Raised when one or more signal groups are not defined by the name tables."""

    def __init__(self, groups):
        self.groups = [groups] if isinstance(groups, str) else list(groups)
        super().__init__(f"Invalid group(s): {self.groups}")


class InvalidLayer(CoreError, KeyError):
    """Raised when one or more name layers are not defined by the name tables."""

    def __init__(self, layers):
        self.layers = [layers] if isinstance(layers, str) else list(layers)
        super().__init__(f"Invalid layer(s): {self.layers}")


class GroupNotFound(CoreError, KeyError):
    """Raised when a requested signal group is not present in a Dataset."""


class SignalNotFound(CoreError, KeyError):
    """Raised when a requested signal name is not present."""


# ---- Mismatch / format errors ----
class SourceTypeMismatch(CoreError):
    """Raised when a native file's recorded source type conflicts with the requested one."""


class UnrecognizedFileFormat(CoreError, ValueError):
    """Raised when a file's format cannot be dispatched to any reader."""


class FileNotFound(CoreError, FileNotFoundError):
    """Raised when an input file does not exist."""
