"""Exception taxonomy for rau.

Every failure is terminal for the invocation.  The CLI prints the message
to stderr and exits with the class's ``exit_code``.
"""

from typing import Optional

EXIT_FAILURE = 1
EXIT_USAGE = 2


class RauError(Exception):
    """Base class for all user-visible rau failures."""

    exit_code = EXIT_FAILURE


class ConfigNotFoundError(RauError):
    """The requested configuration name is absent from the config file."""

    exit_code = EXIT_USAGE

    def __init__(self, name: str, path: Optional[str] = None):
        self.name = name
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(f"Configuration not found{where}: {name}")


class ConfigFileError(RauError):
    """The config file is missing, unreadable, or not valid TOML."""

    exit_code = EXIT_USAGE


class MissingCredentialsError(RauError):
    """No API key in the entry, the file, or the environment."""

    exit_code = EXIT_USAGE


class MalformedArgumentError(RauError):
    """Arguments do not match any request shape."""

    exit_code = EXIT_USAGE


class NetworkError(RauError):
    """The HTTP request never produced a response."""


class RemoteError(RauError):
    """The API answered with a non-2xx status."""

    def __init__(self, action: str, status_code: int, body: str):
        self.action = action
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"Failed to {action}. Status: {status_code}, Response: {body}"
        )


class MalformedResponseError(RauError):
    """A 2xx response whose body is not the JSON we expect."""


class CacheFileError(RauError):
    """The field cache file cannot be written."""
