"""Error types raised by the Terminaut core."""


class TerminautError(Exception):
    """Base class for every error the core raises."""


class ValidationError(TerminautError, ValueError):
    """Input was blank or otherwise unusable (path, query, profile name)."""


class NotFoundError(TerminautError, LookupError):
    """A record or directory addressed by the caller does not exist."""


class MalformedStateError(TerminautError):
    """The state file exists but could not be read or parsed."""

    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed state file {path}: {reason}")


class PersistenceWriteError(TerminautError, OSError):
    """Writing the state file failed. Recorded by the store, never raised to callers."""

    def __init__(self, path, cause):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write state file {path}: {cause}")
