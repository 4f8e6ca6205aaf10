"""Scoped redirection of the process-wide standard streams.

`sys.stdout`, `sys.stderr` and `sys.stdin` are global, so only one invocation
may own them at a time. `REDIRECT_GUARD` is the single lock guarding that
window; `capture_streams` swaps in fresh in-memory buffers and restores the
previous targets on every exit path.
"""

from __future__ import annotations

import contextlib
import dataclasses
import io
import sys
import threading
import typing as typ

from .errors import ReentrancyViolationError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

ERROR_SAME_THREAD = "an invocation is already running on this thread"
ERROR_OTHER_THREAD = "another thread is running an invocation"
ERROR_OTHER_THREAD_TIMEOUT = (
    "another thread is running an invocation (waited {timeout:g}s)"
)
CAPTURE_ENCODING = "utf-8"


class RedirectGuard:
    """Exclusive ownership of the standard streams.

    A second acquisition from the owning thread is always a violation, since
    waiting would deadlock. Other threads fail immediately unless a positive
    timeout allows them to wait for the owner to finish.
    """

    def __init__(self) -> None:
        """Create an unheld guard."""
        self._lock = threading.Lock()
        self._owner: int | None = None

    @property
    def active(self) -> bool:
        """Return True while an invocation holds the streams."""
        return self._lock.locked()

    def acquire(self, timeout: float = 0.0) -> None:
        """Take ownership or raise `ReentrancyViolationError`."""
        current = threading.get_ident()
        if self._owner == current:
            raise ReentrancyViolationError(ERROR_SAME_THREAD)
        if timeout > 0:
            acquired = self._lock.acquire(timeout=timeout)
        else:
            acquired = self._lock.acquire(blocking=False)
        if not acquired:
            detail = (
                ERROR_OTHER_THREAD_TIMEOUT.format(timeout=timeout)
                if timeout > 0
                else ERROR_OTHER_THREAD
            )
            raise ReentrancyViolationError(detail)
        self._owner = current

    def release(self) -> None:
        """Give up ownership."""
        self._owner = None
        self._lock.release()

    @contextlib.contextmanager
    def hold(self, timeout: float = 0.0) -> cabc.Iterator[None]:
        """Hold the guard for the duration of the block."""
        self.acquire(timeout)
        try:
            yield
        finally:
            self.release()


REDIRECT_GUARD = RedirectGuard()


@dataclasses.dataclass(frozen=True, slots=True)
class StreamSnapshot:
    """The stream objects installed on `sys` at one moment."""

    stdout: typ.TextIO
    stderr: typ.TextIO
    stdin: typ.TextIO

    @classmethod
    def take(cls) -> StreamSnapshot:
        """Record the current standard streams."""
        return cls(stdout=sys.stdout, stderr=sys.stderr, stdin=sys.stdin)

    def matches_current(self) -> bool:
        """Return True when `sys` still points at the recorded streams."""
        return (
            sys.stdout is self.stdout
            and sys.stderr is self.stderr
            and sys.stdin is self.stdin
        )

    def restore(self) -> None:
        """Reinstall the recorded streams on `sys`."""
        sys.stdout = self.stdout
        sys.stderr = self.stderr
        sys.stdin = self.stdin


@dataclasses.dataclass(frozen=True, slots=True)
class StreamBuffers:
    """In-memory targets installed for a single invocation.

    Each stream is a UTF-8 text layer over a `BytesIO`, so writes through
    `sys.stdout.buffer` are captured alongside text writes. The buffers are
    left open after `drain`: logging handlers created during the call keep a
    reference to them and must not fail on later records.
    """

    stdout: io.TextIOWrapper
    stderr: io.TextIOWrapper

    @classmethod
    def open(cls) -> StreamBuffers:
        """Create an empty pair of buffers."""
        return cls(stdout=_text_buffer(), stderr=_text_buffer())

    def drain(self) -> tuple[str, str]:
        """Return the text captured so far on stdout and stderr."""
        return _decode(self.stdout), _decode(self.stderr)


def _text_buffer() -> io.TextIOWrapper:
    return io.TextIOWrapper(
        io.BytesIO(),
        encoding=CAPTURE_ENCODING,
        errors="backslashreplace",
        newline="",
        write_through=True,
    )


def _decode(stream: io.TextIOWrapper) -> str:
    stream.flush()
    raw = typ.cast("io.BytesIO", stream.buffer)
    return raw.getvalue().decode(CAPTURE_ENCODING, errors="replace")


@contextlib.contextmanager
def capture_streams(*, stdin: str | None = None) -> cabc.Iterator[StreamBuffers]:
    """Redirect the standard streams to fresh buffers for the block.

    The caller must already hold `REDIRECT_GUARD`. `sys.stdin` is replaced
    with `stdin` (or an empty stream that reads as EOF) so entry points never
    block on the real terminal. The streams recorded on entry are reinstalled
    on exit, even when the block reassigned them.
    """
    snapshot = StreamSnapshot.take()
    buffers = StreamBuffers.open()
    sys.stdout = buffers.stdout
    sys.stderr = buffers.stderr
    sys.stdin = io.StringIO(stdin or "")
    try:
        yield buffers
    finally:
        snapshot.restore()
