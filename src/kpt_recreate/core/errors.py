"""Core exception types for kpt-recreate."""


class KptRecreateError(Exception):
    """Base exception for all kpt-recreate errors."""
    pass


class FilesystemError(KptRecreateError):
    """Raised when copying, walking or deleting part of a tree fails."""
    pass


class ManifestParseError(KptRecreateError):
    """Raised when a Kptfile cannot be read or is not valid YAML."""
    pass


class MissingFieldError(ManifestParseError):
    """Raised when a required upstream field is absent or empty."""

    def __init__(self, field: str, path) -> None:
        super().__init__(f"no git {field} for path {path}")
        self.field = field
        self.path = path


class CommandError(KptRecreateError):
    """Raised when an external command cannot be started or exits non-zero."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


class FetchError(KptRecreateError):
    """Raised when the kpt fetch of a subpackage fails."""

    def __init__(self, message: str, command=None, output: str = "") -> None:
        super().__init__(message)
        self.command = command
        self.output = output


class RecreateError(KptRecreateError):
    """Raised when a recreate run cannot be started with the given tree."""
    pass
