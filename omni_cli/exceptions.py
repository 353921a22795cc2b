"""
omni-cli exception hierarchy.

All custom exceptions live here to avoid circular imports.
"""


class CliError(Exception):
    """Exit code 1 — validation, vault, network, decode and remote errors."""

    exit_code = 1


class SetupError(CliError):
    """Exit code 2 — missing configuration, run setup."""

    exit_code = 2


class ConfigurationError(SetupError):
    """A required environment value is missing or cannot be used as-is."""


class ExternalToolError(CliError):
    """The vault binary failed, was not found, timed out or printed garbage."""


class TransportError(CliError):
    """Non-success HTTP status (other than 404) or connection failure.

    ``status`` is None when no HTTP response was received at all.
    """

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class EndpointNotPublishedError(TransportError):
    """HTTP 404: the Omni function library is not published in Epicor."""

    def __init__(self, message, status=404):
        super().__init__(message, status=status)


class DecodeError(CliError):
    """Response body did not match the expected envelope or variant shape."""


class RemoteApplicationError(CliError):
    """Decoded envelope had ``Error: true``. ``message`` may be empty."""

    def __init__(self, message=""):
        self.message = message or ""
        text = "[ERROR] Epicor returned an error"
        if self.message:
            text += f": {self.message}"
        super().__init__(text)


class HTTPError(Exception):
    """Raised by _http_request for HTTP errors that callers want to classify."""

    def __init__(self, code, reason, body, headers=None):
        self.code = code
        self.reason = reason
        self.body = body
        self.headers = headers or {}
