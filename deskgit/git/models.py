"""Data models for repository status snapshots and working-directory changes."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AppFileStatus(Enum):
    NEW = "New"
    MODIFIED = "Modified"
    DELETED = "Deleted"
    RENAMED = "Renamed"
    CONFLICTED = "Conflicted"
    RESOLVED = "Resolved"
    COPIED = "Copied"


class DiffSelectionType(Enum):
    ALL = "all"
    PARTIAL = "partial"
    NONE = "none"


class ManualConflictResolution(Enum):
    OURS = "ours"
    THEIRS = "theirs"


class DiffSelection(BaseModel):
    """Which lines of a file's diff are included in the next commit.

    The selection starts from a default (every line or no line) and records
    the lines whose state diverges from it. With no knowledge of which lines
    are selectable, any divergence is reported as a partial selection.
    """

    model_config = ConfigDict(frozen=True)

    default_selection_type: DiffSelectionType = DiffSelectionType.ALL
    diverging_lines: frozenset[int] = frozenset()
    selectable_lines: frozenset[int] | None = None

    @classmethod
    def from_initial_selection(cls, initial: DiffSelectionType) -> "DiffSelection":
        if initial is DiffSelectionType.PARTIAL:
            raise ValueError("initial selection must be ALL or NONE")
        return cls(default_selection_type=initial)

    @property
    def selection_type(self) -> DiffSelectionType:
        if not self.diverging_lines:
            return self.default_selection_type

        if (
            self.selectable_lines is not None
            and self.selectable_lines == self.diverging_lines
        ):
            if self.default_selection_type is DiffSelectionType.ALL:
                return DiffSelectionType.NONE
            return DiffSelectionType.ALL

        return DiffSelectionType.PARTIAL

    def is_selected(self, line: int) -> bool:
        diverges = line in self.diverging_lines
        if self.default_selection_type is DiffSelectionType.ALL:
            return not diverges
        return diverges

    def with_line_selection(self, line: int, selected: bool) -> "DiffSelection":
        default_selected = self.default_selection_type is DiffSelectionType.ALL
        if selected == default_selected:
            diverging = self.diverging_lines - {line}
        else:
            diverging = self.diverging_lines | {line}
        return self.model_copy(update={"diverging_lines": diverging})

    def with_select_all(self) -> "DiffSelection":
        return self.model_copy(
            update={
                "default_selection_type": DiffSelectionType.ALL,
                "diverging_lines": frozenset(),
            }
        )

    def with_select_none(self) -> "DiffSelection":
        return self.model_copy(
            update={
                "default_selection_type": DiffSelectionType.NONE,
                "diverging_lines": frozenset(),
            }
        )


class WorkingDirectoryFileChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    status: AppFileStatus
    selection: DiffSelection = Field(default_factory=DiffSelection)

    @property
    def id(self) -> str:
        """Stable across refreshes as long as the path and status are unchanged."""
        return f"{self.status.value}+{self.path}"

    def with_include_all(self, include: bool) -> "WorkingDirectoryFileChange":
        selection = (
            self.selection.with_select_all() if include else self.selection.with_select_none()
        )
        return self.with_selection(selection)

    def with_selection(self, selection: DiffSelection) -> "WorkingDirectoryFileChange":
        return self.model_copy(update={"selection": selection})


def include_all_state(files: list[WorkingDirectoryFileChange]) -> bool | None:
    """Tri-state for the select-all checkbox: True, False, or None when mixed."""
    if not files:
        return True

    types = {f.selection.selection_type for f in files}
    if types == {DiffSelectionType.ALL}:
        return True
    if types == {DiffSelectionType.NONE}:
        return False
    return None


class WorkingDirectoryStatus(BaseModel):
    """The changed files in a working directory, in display order."""

    model_config = ConfigDict(frozen=True)

    files: list[WorkingDirectoryFileChange] = []
    include_all: bool | None = True

    @classmethod
    def from_files(cls, files: list[WorkingDirectoryFileChange]) -> "WorkingDirectoryStatus":
        return cls(files=list(files), include_all=include_all_state(files))


class RebaseInternalState(BaseModel):
    """What git records under ``.git/rebase-merge`` or ``.git/rebase-apply``."""

    model_config = ConfigDict(frozen=True)

    target_branch: str
    original_branch_tip: str
    base_branch_tip: str | None = None


class StatusResult(BaseModel):
    """Point-in-time repository status sampled by the caller."""

    model_config = ConfigDict(frozen=True)

    current_branch: str | None = None
    current_tip: str | None = None
    merge_head_found: bool = False
    rebase_internal_state: RebaseInternalState | None = None
    working_directory: WorkingDirectoryStatus = Field(
        default_factory=WorkingDirectoryStatus
    )
    do_conflicted_files_exist: bool = False
