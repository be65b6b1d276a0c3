"""Root of the Code Archaeologist error hierarchy.

The CLI turns any ArchaeologyError into one error line, or a JSON error
object under ``--json``, and exit status 1.
"""

from typing import Any, Dict, Optional


class ArchaeologyError(Exception):
    """Base exception for all Code Archaeologist errors.

    ``details`` holds the structured context of the failure (repository
    path, git command, config key) and is appended to the message.
    """

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": dict(self.details),
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"
