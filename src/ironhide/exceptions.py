"""Custom exception hierarchy for ironhide.

Every error that crosses a layer boundary inherits from
:class:`IronhideError`.  Raw exceptions from a backend SDK must be
wrapped in :class:`RemoteOperationError` by the adapter, so the CLI
error boundary only ever deals with typed errors.

Hierarchy
---------
IronhideError
├── DirectoryUnavailableError
│   └── ReferenceLookupFailedError
├── UnknownReferenceError
├── GroupNameTakenError
├── InvalidReferenceError
├── UsageError
├── ItemOperationFailedError
├── BatchLimitExceededError
├── RemoteOperationError
├── RefusedOperationError
├── FileAccessError
├── ConfigurationError
│   └── EnvironmentCheckError
└── UserCancelledError
"""

from __future__ import annotations


class IronhideError(Exception):
    """Base exception for all ironhide errors.

    Every user-visible error condition maps to a subclass of this
    exception so the CLI error boundary can render a clean message.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Group directory -------------------------------------------------------

class DirectoryUnavailableError(IronhideError):
    """Raised when the group directory could not be fetched.

    The group cache stays unpopulated, so retrying is safe.
    """


class ReferenceLookupFailedError(DirectoryUnavailableError):
    """Raised when a group reference needed the directory and it failed."""


# --- Group references ------------------------------------------------------

class UnknownReferenceError(IronhideError):
    """Raised when a group name matches none of the caller's groups."""

    def __init__(self, reference: str) -> None:
        super().__init__(
            f"Group '{reference}' doesn't exist or couldn't be retrieved.",
            hint="Run 'ironhide group list', or refer to the group by ID as 'id^<groupID>'.",
        )
        self.reference: str = reference


class GroupNameTakenError(IronhideError):
    """Raised when the caller already belongs to a group with the wanted name."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"You are already in a group with the name '{name}'.",
            hint="Please pick a different name.",
        )
        self.name: str = name


class InvalidReferenceError(IronhideError):
    """Raised when a user or group list contains a malformed entry."""


class UsageError(IronhideError):
    """Raised when command-line flags are combined in an unsupported way."""


# --- Batches ---------------------------------------------------------------

class ItemOperationFailedError(IronhideError):
    """Raised when the operation on a single, non-batched target fails."""


class BatchLimitExceededError(IronhideError):
    """Raised when more targets are given than one batch may process."""


# --- Remote / local resources ----------------------------------------------

class RemoteOperationError(IronhideError):
    """Raised by backends when a call to the key-management service fails."""


class FileAccessError(IronhideError):
    """Raised when a source or destination file cannot be used."""


class RefusedOperationError(IronhideError):
    """Raised when a command would act on something it must not touch."""


# --- Environment / configuration -------------------------------------------

class ConfigurationError(IronhideError):
    """Raised when settings are missing or malformed."""


class EnvironmentCheckError(ConfigurationError):
    """Raised when a required runtime dependency is not available."""


# --- Interaction -----------------------------------------------------------

class UserCancelledError(IronhideError):
    """Raised when the user closes the input stream during a prompt.

    Not a failure: the CLI boundary exits with a success code.
    """

    def __init__(self, message: str = "Cancelled by user.") -> None:
        super().__init__(message)
