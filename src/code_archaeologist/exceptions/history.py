"""History-related exceptions: repository access, git queries, lookups."""

from typing import Optional, Sequence

from .base import ArchaeologyError


class HistoryError(ArchaeologyError):
    """Base class for errors raised while mining version-control history."""

    pass


class SourceUnavailable(HistoryError):
    """Raised when the repository cannot be opened or a path is not tracked.

    Always fatal to the enclosing analysis.
    """

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"History unavailable for {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class QueryFailed(HistoryError):
    """Raised when a single git invocation exits with an error.

    Optional sub-queries absorb this and fall back to a zero-valued default;
    mandatory ones let it propagate.
    """

    def __init__(self, args: Sequence[str], reason: str, returncode: Optional[int] = None):
        details = {"command": "git " + " ".join(args), "reason": reason}
        if returncode is not None:
            details["returncode"] = str(returncode)
        super().__init__("git query failed", details=details)
        self.args_list = list(args)
        self.reason = reason
        self.returncode = returncode


class NotFound(ArchaeologyError):
    """Raised when a requested file or function does not exist."""

    def __init__(self, kind: str, name: str, location: Optional[str] = None):
        message = f"{kind.capitalize()} not found: {name}"
        if location:
            message = f"{kind.capitalize()} {name!r} not found in {location}"
        details = {"kind": kind, "name": name}
        if location:
            details["location"] = location
        super().__init__(message, details=details)
        self.kind = kind
        self.name = name
        self.location = location
