"""Error types raised while loading sources and writing packages."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure categories reported by the package author."""

    IO = "io"
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    UNSUPPORTED_FORMAT = "unsupported_format"
    PACKAGE_OVERFLOW = "package_overflow"


class PackageError(Exception):
    """Raised when a presentation cannot be turned into a package.

    Carries a ``kind`` tag from :class:`ErrorKind` and a human-readable
    message. No partial archive is ever returned alongside this error.
    """

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = ErrorKind(kind)
        self.message = message
        super().__init__(f"{self.kind.value}: {message}")

    @classmethod
    def from_os_error(cls, exc: OSError, what: str) -> "PackageError":
        if isinstance(exc, FileNotFoundError):
            return cls(ErrorKind.NOT_FOUND, f"{what} not found: {exc.filename or exc}")
        return cls(ErrorKind.IO, f"failed to read {what}: {exc}")


class ConfigError(ValueError):
    """Raised when a configuration file or deck description is invalid."""

    def __init__(self, issues: list[str]):
        self.issues = [str(i).strip() for i in issues if str(i).strip()]
        if not self.issues:
            self.issues = ["Invalid configuration"]
        super().__init__(self._format())

    def _format(self) -> str:
        lines = ["Configuration validation failed:"]
        for issue in self.issues:
            lines.append(f"- {issue}")
        return "\n".join(lines)
