"""Weighted multi-step parser for git's human-readable progress output.

Git reports each stage of a long-running operation (``clone``, ``fetch``,
``push``, ...) as its own 0-100% counter. The parsers here fold those
per-stage counters into one overall fraction between 0 and 1.

Some examples of lines git writes to stderr::

    remote: Counting objects: 123
    remote: Counting objects: 167587, done.
    Receiving objects:  99% (166741/167587), 272.10 MiB | 2.39 MiB/s
    Checking out files: 100% (728/728), done.
"""

import re
from collections.abc import Sequence

from deskgit.exceptions import ProgressParserError
from deskgit.progress.models import (
    GitOutput,
    GitProgress,
    GitProgressInfo,
    ProgressStep,
)

# At most 19 digits, the width of a 64-bit counter.
_COUNTER = r"\d{1,19}"
_PERCENT_RE = re.compile(rf"(\d{{1,3}})% \(({_COUNTER})/({_COUNTER})\)", re.ASCII)
_VALUE_ONLY_RE = re.compile(_COUNTER, re.ASCII)
_TITLE_SEPARATOR = ": "
_DONE_MARKER = "done."


def parse_progress_line(line: str) -> GitProgressInfo | None:
    """Parse one line of git progress output, or return None if it isn't one."""
    title_length = line.rfind(_TITLE_SEPARATOR)
    if title_length <= 0:
        return None

    title = line[:title_length]
    progress_text = line[title_length + len(_TITLE_SEPARATOR) :].strip()
    if not progress_text:
        return None

    parts = progress_text.split(", ")

    total: int | None = None
    percent: int | None = None

    if _VALUE_ONLY_RE.fullmatch(parts[0]):
        value = int(parts[0])
    else:
        match = _PERCENT_RE.fullmatch(parts[0])
        if match is None:
            return None
        percent = int(match.group(1))
        value = int(match.group(2))
        total = int(match.group(3))

    # Throughput text is not interpreted; only the completion marker matters.
    done = _DONE_MARKER in parts[1:]

    return GitProgressInfo(
        title=title,
        value=value,
        total=total,
        percent=percent,
        done=done,
        text=line,
    )


class GitProgressParser:
    """Turns a stream of progress lines into an overall completion fraction.

    Steps are expected in order but some may never appear (remote compression
    is often skipped), so the parser remembers the furthest step seen and
    treats everything before it as complete. A line for an earlier step is
    reported as context and never moves progress backwards.

    One instance serves exactly one output stream.
    """

    def __init__(self, steps: Sequence[ProgressStep]) -> None:
        if not steps:
            raise ProgressParserError("must specify at least one step")

        total_weight = sum(step.weight for step in steps)
        if total_weight <= 0:
            raise ProgressParserError("step weights must add up to more than zero")

        self._steps: tuple[ProgressStep, ...] = tuple(
            ProgressStep(title=step.title, weight=step.weight / total_weight)
            for step in steps
        )
        self._step_index = 0
        self._last_percent = 0.0

    @property
    def steps(self) -> tuple[ProgressStep, ...]:
        return self._steps

    @property
    def step_index(self) -> int:
        return self._step_index

    @property
    def last_percent(self) -> float:
        return self._last_percent

    def parse(self, line: str) -> GitProgress | GitOutput:
        progress = parse_progress_line(line)
        if progress is None:
            return GitOutput(percent=self._last_percent, text=line)

        completed = 0.0
        for index, step in enumerate(self._steps):
            if index >= self._step_index and progress.title == step.title:
                if progress.total:
                    percent = completed + step.weight * (progress.value / progress.total)
                else:
                    percent = self._last_percent

                self._step_index = index
                self._last_percent = percent
                return GitProgress(percent=percent, details=progress)
            completed += step.weight

        return GitOutput(percent=self._last_percent, text=line)


def _steps(*pairs: tuple[str, float]) -> list[ProgressStep]:
    return [ProgressStep(title=title, weight=weight) for title, weight in pairs]


class CloneProgressParser(GitProgressParser):
    """Progress for ``git clone --progress``."""

    STEPS = _steps(
        ("remote: Compressing objects", 0.1),
        ("Receiving objects", 0.6),
        ("Resolving deltas", 0.1),
        ("Checking out files", 0.2),
    )

    def __init__(self) -> None:
        super().__init__(self.STEPS)


class FetchProgressParser(GitProgressParser):
    """Progress for ``git fetch --progress``."""

    STEPS = _steps(
        ("remote: Compressing objects", 0.1),
        ("Receiving objects", 0.7),
        ("Resolving deltas", 0.2),
    )

    def __init__(self) -> None:
        super().__init__(self.STEPS)


class PullProgressParser(GitProgressParser):
    """Progress for ``git pull --progress``; a fetch followed by a checkout."""

    STEPS = _steps(
        ("remote: Compressing objects", 0.1),
        ("Receiving objects", 0.7),
        ("Resolving deltas", 0.15),
        ("Checking out files", 0.15),
    )

    def __init__(self) -> None:
        super().__init__(self.STEPS)


class PushProgressParser(GitProgressParser):
    """Progress for ``git push --progress``."""

    STEPS = _steps(
        ("Compressing objects", 0.2),
        ("Writing objects", 0.7),
        ("remote: Resolving deltas", 0.1),
    )

    def __init__(self) -> None:
        super().__init__(self.STEPS)


class CheckoutProgressParser(GitProgressParser):
    """Progress for ``git checkout --progress``."""

    STEPS = _steps(("Checking out files", 1))

    def __init__(self) -> None:
        super().__init__(self.STEPS)
