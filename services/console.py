from __future__ import annotations

import logging
import threading
from typing import Iterable, List, TextIO

logger = logging.getLogger(__name__)


def say(text: str) -> str:
    return f"say {text}"


class ConsoleSink:
    """Line-oriented, fire-and-forget channel to the server console."""

    def puts(self, line: str) -> None:
        raise NotImplementedError

    def write_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.puts(line)


class StreamConsole(ConsoleSink):
    """Writes each statement to a text stream such as the server's stdin."""

    def __init__(self, stream: TextIO):
        self._stream = stream
        self._lock = threading.Lock()

    def puts(self, line: str) -> None:
        text = str(line).rstrip("\n")
        with self._lock:
            self._stream.write(text + "\n")
            self._stream.flush()
        logger.debug("console <- %s", text)


class BufferConsole(ConsoleSink):
    """Collects statements in memory."""

    def __init__(self) -> None:
        self.lines: List[str] = []

    def puts(self, line: str) -> None:
        self.lines.append(str(line).rstrip("\n"))

    def clear(self) -> List[str]:
        out, self.lines = self.lines, []
        return out
