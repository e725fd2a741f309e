"""
Standard exit codes for refdocs commands.

Following Unix/POSIX conventions for command-line tools. Every fatal
condition of a build run maps to one exception class below, and each
class carries the exit code the CLI terminates with.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
CONFIG_ERROR = 66        # Build configuration or settings file error
DATA_ERROR = 70          # Data format or serialization error
VCS_ERROR = 72           # git listing/checkout failed
BUILD_ERROR = 73         # Documentation generator failed
FILESYSTEM_ERROR = 74    # Output tree could not be prepared
TEMPLATE_ERROR = 75      # Index template could not be loaded or rendered
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
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


def describe_error(exc: BaseException) -> str:
    """
    Render an exception and its chained causes as one line.

    Example:
        "failed to check out 'refs/tags/v1.0': git exited with status 1"
    """
    parts = []
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        text = str(current).strip() or current.__class__.__name__
        if not parts or text != parts[-1]:
            parts.append(text)
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__suppress_context__:
            current = None
        else:
            current = current.__context__
    return ": ".join(parts)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class RefdocsError(CommandError):
    """Base class for every fatal condition of a documentation build."""


class VCSError(RefdocsError):
    """Raised when listing references or checking one out fails."""
    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message, VCS_ERROR)
        self.stderr = stderr


class ConfigurationError(RefdocsError):
    """Raised for unreadable config files, bad include lines or include cycles."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class BuildError(RefdocsError):
    """Raised when the documentation generator cannot run or exits non-zero."""
    def __init__(self, message: str, stderr: str = "", returncode: Optional[int] = None):
        super().__init__(message, BUILD_ERROR)
        self.stderr = stderr
        self.returncode = returncode

    def __str__(self) -> str:
        message = super().__str__()
        if self.stderr.strip():
            return f"{message}\n{self.stderr.rstrip()}"
        return message


class FilesystemError(RefdocsError):
    """Raised when the output tree cannot be created or a slug collides."""
    def __init__(self, message: str):
        super().__init__(message, FILESYSTEM_ERROR)


class TemplateError(RefdocsError):
    """Raised when the index template cannot be parsed or bound."""
    def __init__(self, message: str):
        super().__init__(message, TEMPLATE_ERROR)


class SerializationError(RefdocsError):
    """Raised when the version index cannot be serialized to JSON."""
    def __init__(self, message: str):
        super().__init__(message, DATA_ERROR)
