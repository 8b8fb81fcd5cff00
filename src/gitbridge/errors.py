"""Exception hierarchy for the git bridge."""

from pathlib import Path


class BridgeError(Exception):
    """Base exception for bridge errors."""

    def __init__(self, message: str, tool_name: str | None = None) -> None:
        self.tool_name = tool_name
        super().__init__(message)


class ToolInvocationError(BridgeError):
    """Raised when the external tool fails to launch, exits non-zero or times out.

    Attributes:
        exit_code: Process exit code (None if the process never ran to completion)
        stderr: Captured standard error, if any
        cause: Underlying exception for launch failures
        timeout: True if the process was killed after the timeout expired
    """

    def __init__(
        self,
        message: str,
        tool_name: str | None = None,
        exit_code: int | None = None,
        stderr: str | None = None,
        cause: BaseException | None = None,
        timeout: bool = False,
    ) -> None:
        super().__init__(message, tool_name)
        self.exit_code = exit_code
        self.stderr = stderr
        self.cause = cause
        self.timeout = timeout

    @property
    def reason(self) -> str:
        """Short description of what went wrong, preferring the root cause."""
        if self.cause is not None:
            return str(self.cause)
        if self.stderr and self.stderr.strip():
            return self.stderr.strip()
        return str(self)


class MalformedRevisionError(BridgeError):
    """Raised when a revision string matches no known encoding."""

    def __init__(self, message: str, revision: str) -> None:
        super().__init__(message)
        self.revision = revision


class RepositoryNotFoundError(BridgeError):
    """Raised when a path is not inside any git working tree."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(message)
        self.path = path


class UnsupportedVersionWarning(UserWarning):
    """A detected tool version below the supported minimum.

    Never raised by the bridge; rendered to the console sink instead.
    """

    def __init__(self, version: object, minimum: object, raw: str | None = None) -> None:
        self.version = version
        self.minimum = minimum
        self.raw = raw
        super().__init__(
            f"Unsupported git version {version}: "
            f"the minimum supported version is {minimum}"
        )
