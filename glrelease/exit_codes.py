"""
Standard exit codes and error types for glrelease commands.

Following Unix/POSIX conventions for command-line tools. Every fatal
condition is raised as a CommandError subclass carrying the exit code the
process should terminate with.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
API_ERROR = 65           # GitLab API call failed
CONFIG_ERROR = 66        # Invalid request, source or configuration
PERMISSION_ERROR = 67    # Insufficient permissions
NETWORK_ERROR = 68       # Network connection failed or host unavailable
DATA_ERROR = 70          # Local inputs do not match what was asked for
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ConnectionError': NETWORK_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': CONFIG_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigurationError(CommandError):
    """Raised for an invalid tag filter, source, params or missing input file.

    Always detected before the host is contacted.
    """
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class GlobMismatchError(CommandError):
    """Raised when a configured file pattern matches no local files."""
    def __init__(self, pattern: str):
        super().__init__(f"could not find file that matches glob '{pattern}'", DATA_ERROR)
        self.pattern = pattern


class APIError(CommandError):
    """Raised when an external API call fails."""
    def __init__(self, message: str, exit_code: int = API_ERROR):
        super().__init__(message, exit_code)


class HostError(APIError):
    """
    The repository host rejected or failed a request.

    Attributes:
        status: HTTP status code, or None when no response was received
    """
    def __init__(self, message: str, status: Optional[int] = None, exit_code: int = API_ERROR):
        super().__init__(message, exit_code)
        self.status = status


class NotFoundError(HostError):
    """The requested tag, release or file does not exist on the host."""
    def __init__(self, message: str):
        super().__init__(message, status=404)


class ConflictError(HostError):
    """The host refused a create because the object already exists."""
    def __init__(self, message: str):
        super().__init__(message, status=409)


class TransientHostError(HostError):
    """A network failure, timeout, rate limit or 5xx answer from the host."""
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message, status=status, exit_code=NETWORK_ERROR)
