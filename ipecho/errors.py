class AppError(Exception):
    """Base application error for the address echo service."""


class ResolutionError(AppError):
    """Base error for failures while determining the caller's address."""


class EchoServiceError(ResolutionError):
    """Raised when the external echo service cannot be reached or answers with an error."""


class EchoTimeoutError(EchoServiceError):
    """Raised when the echo service does not answer within the probe timeout."""


class PeerAddressUnavailableError(ResolutionError):
    """Raised when the platform did not record a peer address for the inbound connection."""
