"""Exceptions for vagga-settings."""

from pathlib import Path


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigFileError(ConfigError):
    """Error reading or decoding a settings file.

    Attributes:
        path: Settings file that failed
        detail: Human readable cause
    """

    def __init__(self, path: Path, detail: str):
        super().__init__(f"Error reading settings file {path}: {detail}")
        self.path = path
        self.detail = detail


class ConfigValidationError(ConfigFileError):
    """Settings file does not match the schema of its tier."""

    pass


class ConfigExpansionError(ConfigError):
    """A `~` path in a settings file could not be expanded.

    Attributes:
        field: Name of the settings field holding the path
        path: Settings file the value came from
    """

    def __init__(self, field: str, path: Path):
        super().__init__(f"Can't expand tilde `~` in {field} from {path}: no HOME found")
        self.field = field
        self.path = path


class NoHomeError(Exception):
    """No home directory is available for tilde expansion."""

    pass


class LockError(Exception):
    """Base exception for lock acquisition failures."""

    pass


class LockWouldBlock(LockError):
    """Lock is already held by another holder."""

    def __init__(self, path: Path):
        super().__init__(f"Lock {path} is held by another process")
        self.path = path


class LockIoError(LockError):
    """OS-level failure while creating or locking the lock file."""

    def __init__(self, path: Path, detail: str):
        super().__init__(f"Can't lock {path}: {detail}")
        self.path = path
        self.detail = detail
