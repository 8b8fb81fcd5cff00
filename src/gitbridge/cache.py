"""Version cache guarding git version detection.

The cache remembers the version detected for one executable path. Detection
runs under a single non-reentrant lock. Before the tool is invoked the
cached value is set to ToolVersion.INVALID and the detecting thread is
recorded; a call that re-enters ensure_version() from inside detection
returns that INVALID value immediately instead of recursing or blocking.
Other threads wait on the lock and then see the fresh result.
"""

import logging
import threading
from collections.abc import Callable
from enum import Enum

from gitbridge.commands.base import CommandRunner
from gitbridge.commands.git import read_version
from gitbridge.console import ConsoleSink, ConsoleStyle
from gitbridge.errors import BridgeError, ToolInvocationError, UnsupportedVersionWarning
from gitbridge.version import MIN_SUPPORTED_VERSION, ToolVersion

logger = logging.getLogger(__name__)

# (runner, executable) -> raw version string
VersionDetector = Callable[[CommandRunner, str], str]


class CacheState(str, Enum):
    """Detection state of a VersionCache."""

    UNCHECKED = "unchecked"
    CHECKING = "checking"
    CHECKED = "checked"


class VersionCache:
    """Caches the detected tool version keyed by executable path."""

    def __init__(
        self,
        runner: CommandRunner,
        sink: ConsoleSink,
        minimum: ToolVersion = MIN_SUPPORTED_VERSION,
        detector: VersionDetector = read_version,
    ) -> None:
        """Initialize the cache.

        Args:
            runner: Runner used to invoke the tool
            sink: Console sink for failure and unsupported-version messages
            minimum: Minimum supported version
            detector: Function returning the tool's raw version string
        """
        self._runner = runner
        self._sink = sink
        self._minimum = minimum
        self._detector = detector

        self._lock = threading.Lock()
        self._state = CacheState.UNCHECKED
        self._version = ToolVersion.UNKNOWN
        self._executable = ""
        self._detecting_thread: int | None = None

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def cached_version(self) -> ToolVersion:
        return self._version

    @property
    def cached_executable(self) -> str:
        return self._executable

    @property
    def minimum(self) -> ToolVersion:
        return self._minimum

    def ensure_version(self, executable: str) -> ToolVersion:
        """Return the version of an executable, detecting it only when stale.

        Args:
            executable: Path or name of the configured git executable

        Returns:
            The detected version, or ToolVersion.INVALID if detection failed
            or is already in progress on the calling thread
        """
        # Only the detecting thread can match its own ident here
        if self._detecting_thread == threading.get_ident():
            return self._version

        with self._lock:
            if self._state == CacheState.CHECKED and self._executable == executable:
                return self._version

            self._executable = executable
            self._version = ToolVersion.INVALID
            self._state = CacheState.CHECKING
            self._detecting_thread = threading.get_ident()
            try:
                self._version = self._detect(executable)
            finally:
                self._state = CacheState.CHECKED
                self._detecting_thread = None
            return self._version

    def invalidate(self) -> None:
        """Forget the cached version so the next call detects again.

        Called from inside a running detection this is a no-op: the
        detection in progress stores its own result when it finishes.
        """
        if self._detecting_thread == threading.get_ident():
            return
        with self._lock:
            self._state = CacheState.UNCHECKED
            self._version = ToolVersion.UNKNOWN
            self._executable = ""

    def _detect(self, executable: str) -> ToolVersion:
        """Run the detector and report problems. Never raises for tool failures."""
        try:
            raw = self._detector(self._runner, executable).strip()
        except ToolInvocationError as e:
            self._report_failure(executable, e.reason)
            return ToolVersion.INVALID
        except (BridgeError, OSError) as e:
            self._report_failure(executable, str(e))
            return ToolVersion.INVALID

        try:
            version = ToolVersion.parse(raw)
        except ValueError:
            self._report_failure(executable, f"unrecognized version output {raw!r}")
            return ToolVersion.INVALID

        logger.debug("Detected git %s at %s", version, executable)
        if not version.is_supported(self._minimum):
            warning = UnsupportedVersionWarning(version, self._minimum, raw=raw)
            logger.warning("%s", warning)
            self._sink.write(str(warning), ConsoleStyle.SYSTEM_OUTPUT)
        return version

    def _report_failure(self, executable: str, reason: str) -> None:
        message = f"Unable to run git executable '{executable}': {reason}"
        logger.warning("%s", message)
        self._sink.write(message, ConsoleStyle.ERROR)
