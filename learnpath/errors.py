"""Exception types raised by learnpath."""


class LearnPathError(Exception):
    """Base class for learnpath errors."""

    pass


class ConfigError(LearnPathError):
    """Raised when environment configuration cannot be parsed."""

    pass


class NetworkError(LearnPathError):
    """Raised when the remote catalog cannot be reached or returns unusable data."""

    pass


class NotFoundError(LearnPathError):
    """Raised when an identifier is absent from both remote and fallback catalogs."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind.capitalize()} not found: {identifier}")


class StorageError(LearnPathError):
    """Raised when the on-device key-value store fails."""

    pass


class SessionError(LearnPathError):
    """Raised for an interaction that the current lesson page does not support."""

    pass


class EmptyCodeError(SessionError):
    """Raised when running an empty code buffer."""

    pass


class ScopeClosedError(LearnPathError):
    """Raised when scheduling work on a screen scope that has been closed."""

    pass


class MalformedKeyError(ValueError):
    """Raised when a completion key does not have exactly two components."""

    pass
