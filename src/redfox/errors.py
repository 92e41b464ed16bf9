"""Error taxonomy shared by the engine and the CLI."""

from __future__ import annotations

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INPUT = 2
EXIT_CONNECTIVITY = 3


class RedFoxError(Exception):
    """Base class for all RedFox errors."""

    exit_code = EXIT_FAILURE


class InputError(RedFoxError):
    """Missing or malformed user input (wordlists, targets, options)."""

    exit_code = EXIT_INPUT


class ExhaustedInputError(InputError):
    """A required wordlist or combo list is missing or empty."""


class ConfigError(InputError):
    """The configuration file is unreadable or has invalid values."""


class ScopeError(InputError):
    """The target is outside the configured engagement scope."""


class NetworkError(RedFoxError):
    """Connection-level failure talking to the target."""

    exit_code = EXIT_CONNECTIVITY
    transient = True


class TransientNetworkError(NetworkError):
    """Connection refused/reset and similar failures worth retrying."""


class PermanentNetworkError(NetworkError):
    """DNS or TLS failures that will not go away by retrying."""

    transient = False


class AttemptTimeoutError(RedFoxError):
    """A single attempt exceeded its timeout."""


class RateLimitedError(RedFoxError):
    """The target signalled throttling."""

    def __init__(self, message: str = "rate limited", retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after
