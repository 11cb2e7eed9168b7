from __future__ import annotations


class KairosError(RuntimeError):
    """Base class for errors raised by the Kairos clients."""


class ConfigurationError(KairosError):
    """A required credential or URL is not configured."""


class StorageError(KairosError):
    """A Supabase identity or table call failed."""


class CompletionError(KairosError):
    """The completion API could not be reached or returned an unreadable body."""


class CompletionAPIError(CompletionError):
    """The completion API answered with a non-success status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(f"Completion API returned {status_code}: {message}")
        self.message = message
        self.status_code = status_code
