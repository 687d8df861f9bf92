import queue
import time
from typing import Any, Callable, Iterator, List, Optional

# Longest single wait on a queue before the cancel signal is checked again
POLL_INTERVAL = 0.05


class BasicIO:
    """Output sink and input source of one Parseon run.

    Output lines are collected in ``self.output``; if ``echo`` is given each
    line is also passed to it as soon as it is produced. Input is pulled
    lazily, one line per ``ask``, from either an iterable of lines or a
    ``queue.Queue``. A queue is waited on for at most ``input_timeout``
    seconds (forever when it is None), and the wait ends early once
    ``cancel`` is set.
    """
    def __init__(self, input_source: Optional[Any] = None,
                 echo: Optional[Callable[[str], Any]] = None,
                 input_timeout: Optional[float] = None,
                 cancel: Optional[Any] = None):
        self.output: List[str] = []
        self.echo = echo
        self.input_timeout = input_timeout
        self.cancel = cancel
        self._queue: Optional[queue.Queue] = None
        self._lines: Optional[Iterator[str]] = None
        if isinstance(input_source, queue.Queue):
            self._queue = input_source
        elif isinstance(input_source, str):
            self._lines = iter(input_source.splitlines())
        elif input_source is not None:
            self._lines = iter(input_source)

    def write_line(self, text: str):
        self.output.append(text)
        if self.echo is not None:
            self.echo(text)

    def read_line(self) -> Optional[str]:
        """Return the next input line without its line ending, or None."""
        if self._queue is not None:
            line = self._wait_for_queue()
        elif self._lines is not None:
            line = next(self._lines, None)
        else:
            return None
        if line is None:
            return None
        return line.rstrip('\r\n')

    def _wait_for_queue(self) -> Optional[str]:
        expires = None
        if self.input_timeout is not None:
            expires = time.monotonic() + self.input_timeout
        while True:
            wait = POLL_INTERVAL
            if expires is not None:
                wait = max(0.0, min(wait, expires - time.monotonic()))
            try:
                return self._queue.get(timeout=wait)
            except queue.Empty:
                if self.cancel is not None and self.cancel.is_set():
                    return None
                if expires is not None and time.monotonic() >= expires:
                    return None
