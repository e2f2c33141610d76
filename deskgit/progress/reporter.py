"""Feeds raw subprocess output to a progress parser one complete line at a time."""

import asyncio
import codecs
import re
from collections.abc import Callable
from typing import Protocol

import structlog

from deskgit.progress.models import GitOutput, GitProgress

logger = structlog.get_logger()

# git redraws progress lines in place with a bare carriage return.
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_READ_CHUNK_SIZE = 4096

ProgressCallback = Callable[[GitProgress | GitOutput], None]


class LineParser(Protocol):
    def parse(self, line: str) -> GitProgress | GitOutput: ...


class ProgressReporter:
    """Splits chunks into lines, parses them in order and forwards each event.

    A trailing partial line is held back until the next chunk completes it
    or :meth:`flush` is called at end of stream. Lines are never reordered.
    """

    def __init__(self, parser: LineParser, callback: ProgressCallback) -> None:
        self._parser = parser
        self._callback = callback
        self._pending = ""
        self._lines_seen = 0

    @property
    def lines_seen(self) -> int:
        return self._lines_seen

    def feed(self, chunk: str) -> None:
        if not chunk:
            return
        *complete, self._pending = _LINE_BREAK_RE.split(self._pending + chunk)
        for line in complete:
            self._dispatch(line)

    def flush(self) -> None:
        pending, self._pending = self._pending, ""
        self._dispatch(pending)

    async def consume(self, stream: asyncio.StreamReader) -> None:
        """Drain an asyncio subprocess stream until EOF."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            data = await stream.read(_READ_CHUNK_SIZE)
            if not data:
                break
            self.feed(decoder.decode(data))
        self.feed(decoder.decode(b"", final=True))
        self.flush()

    def _dispatch(self, line: str) -> None:
        if not line.strip():
            return
        self._lines_seen += 1
        event = self._parser.parse(line)
        try:
            self._callback(event)
        except Exception:
            logger.exception("progress_callback_error", line=line)
