"""
Error taxonomy for the oio client.

The API layer raises these; only the command layer catches OioError and
turns it into an `✗ message` on stderr plus exit status 1.

HTTP status codes are not errors at the request layer. An operation that
interprets a status (404 → NotFound, 403 → ProRequired, anything else it
did not expect → ApiError) raises the matching class itself.
"""

import requests


class OioError(Exception):
    """Base class for every error the client raises on purpose."""


class InvalidTTL(OioError, ValueError):
    HINT = 'Use: 30s, 60m, 24h, or 7d'

    def __init__(self, message=None):
        super().__init__(message or f'invalid TTL format. {self.HINT}')


class NotConfigured(OioError):
    def __init__(self, message='not configured. Please log in first'):
        super().__init__(message)


class NotAuthenticated(OioError):
    def __init__(self, message='not authenticated. Please log in first'):
        super().__init__(message)


class AuthExpired(OioError):
    """Token refresh failed. `cause` holds the refresh error."""

    def __init__(self, cause):
        self.cause = cause
        super().__init__(f'authentication expired: {cause}')


class TransportError(OioError):
    """
    No response was obtained: DNS, connect, TLS, reset, or timeout.

    `kind` is one of TIMEOUT, CONNECTION_RESET, OTHER and is derived from
    the exception type, never from its message.
    """

    TIMEOUT = 'timeout'
    CONNECTION_RESET = 'connection_reset'
    OTHER = 'other'

    def __init__(self, message, kind=OTHER, url=None):
        self.kind = kind
        self.url = url
        super().__init__(message)

    @classmethod
    def from_exception(cls, exc, url=None) -> 'TransportError':
        """Classify a requests exception. ConnectTimeout counts as a timeout."""
        if isinstance(exc, requests.exceptions.Timeout):
            kind = cls.TIMEOUT
        elif isinstance(exc, (requests.exceptions.ConnectionError,
                              requests.exceptions.ChunkedEncodingError)):
            kind = cls.CONNECTION_RESET
        else:
            kind = cls.OTHER
        return cls(str(exc) or type(exc).__name__, kind=kind, url=url)

    @property
    def is_connection_error(self) -> bool:
        return self.kind in (self.TIMEOUT, self.CONNECTION_RESET)


class ProRequired(OioError):
    def __init__(self, message='this item requires a Pro subscription'):
        super().__init__(message)


class NotFound(OioError):
    def __init__(self, item_id, message=None):
        self.item_id = item_id
        super().__init__(
            message
            or f'no item found with ID "{item_id}". '
               'The item may have expired or never existed'
        )


class UploadPartFailed(OioError):
    """A part exhausted its retry budget. `last_error` is the final attempt's error."""

    def __init__(self, part_number, attempts, last_error):
        self.part_number = part_number
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f'failed to upload part {part_number} after {attempts} attempts: {last_error}'
        )


class ApiError(OioError):
    """The server answered, but not with the status the operation needed."""

    def __init__(self, message, status_code=None):
        self.status_code = status_code
        super().__init__(message)
