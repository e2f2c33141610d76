"""Progress parsing for git-lfs transfers.

git-lfs writes its own progress format to the file named by
``GIT_LFS_PROGRESS``, one line per update::

    <direction> <current>/<total files> <downloaded>/<total> <name>
"""

import math
import re

from pydantic import BaseModel, ConfigDict

from deskgit.progress.models import GitOutput, GitProgress, GitProgressInfo

_COUNTER = r"[0-9]{1,19}"
_LFS_PROGRESS_LINE_RE = re.compile(
    rf"(.+?)\s({_COUNTER})/({_COUNTER})\s({_COUNTER})/({_COUNTER})\s(.+)"
)
_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")
_DIRECTION_VERBS = {
    "download": "Downloading",
    "upload": "Uploading",
    "checkout": "Checking out",
}
INITIAL_LFS_TEXT = "Downloading Git LFS file…"


class LFSProgressRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    direction: str
    current: int
    total_files: int
    downloaded_bytes: int
    total_bytes: int
    name: str

    @property
    def percent(self) -> float:
        return self.downloaded_bytes / self.total_bytes


def parse_lfs_record(line: str) -> LFSProgressRecord | None:
    """Extract the fields of an LFS progress line.

    A file index or byte count of 0 is treated like a non-matching line.
    """
    match = _LFS_PROGRESS_LINE_RE.fullmatch(line)
    if match is None:
        return None

    direction = match.group(1)
    current = int(match.group(2))
    total_files = int(match.group(3))
    downloaded_bytes = int(match.group(4))
    total_bytes = int(match.group(5))
    name = match.group(6)

    if not (direction and current and total_files and downloaded_bytes and total_bytes and name):
        return None

    return LFSProgressRecord(
        direction=direction,
        current=current,
        total_files=total_files,
        downloaded_bytes=downloaded_bytes,
        total_bytes=total_bytes,
        name=name,
    )


def parse_lfs_progress_line(line: str) -> GitProgress | GitOutput:
    """Turn one LFS progress line into a progress event for that file."""
    record = parse_lfs_record(line)
    if record is None:
        return GitOutput(percent=0, text=line)

    return GitProgress(
        percent=record.percent,
        details=GitProgressInfo(
            title=f"Downloading {record.name}…",
            value=record.downloaded_bytes,
            total=record.total_bytes,
            done=False,
            text=line,
        ),
    )


def format_bytes(size: int) -> str:
    """Render a byte count the way the transfer status line shows it."""
    if size == 0:
        return "0 Bytes"
    base = min(int(math.floor(math.log(size, 1024))), len(_SIZE_UNITS) - 1)
    scaled = f"{size / 1024**base:.2f}".rstrip("0").rstrip(".")
    return f"{scaled}{_SIZE_UNITS[base]}"


def direction_to_verb(direction: str) -> str:
    return _DIRECTION_VERBS.get(direction, "Downloading")


class GitLFSProgressParser:
    """Aggregates byte counts across every file of one LFS transfer.

    git-lfs interleaves updates for several files, each identified by its
    index. The latest counts per index are kept and summed so the reported
    percent covers the whole transfer rather than the last file touched.
    """

    def __init__(self) -> None:
        self._updates: dict[int, tuple[int, int]] = {}
        self._last_result: GitProgress | GitOutput = GitOutput(
            percent=0, text=INITIAL_LFS_TEXT
        )

    @property
    def last_result(self) -> GitProgress | GitOutput:
        return self._last_result

    def parse(self, line: str) -> GitProgress | GitOutput:
        record = parse_lfs_record(line)
        if record is None:
            return self._last_result

        self._updates[record.current] = (record.downloaded_bytes, record.total_bytes)

        downloaded = sum(done for done, _ in self._updates.values())
        total = sum(size for _, size in self._updates.values())
        finished_files = sum(1 for done, size in self._updates.values() if done == size)

        verb = direction_to_verb(record.direction)
        transferred = f"{format_bytes(downloaded)}/{format_bytes(total)}"
        info = GitProgressInfo(
            title=f'{verb} "{record.name}" {transferred}…',
            value=downloaded,
            total=total,
            done=finished_files == record.total_files,
            text=f"{verb} {finished_files}/{record.total_files} {transferred}",
        )

        self._last_result = GitProgress(percent=downloaded / total, details=info)
        return self._last_result
