"""Single-writer holder of one repository's changes state."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict

from deskgit.core.events import (
    SELECTION_CHANGED,
    STATUS_APPLIED,
    Event,
    EventBus,
    conflict_event_name,
)
from deskgit.exceptions import StaleStateError
from deskgit.state.changes import (
    ChangesState,
    select_working_directory_files,
    update_changed_files,
)
from deskgit.state.conflicts import ConflictSignal, update_conflict_state

if TYPE_CHECKING:
    from deskgit.git.models import StatusResult, WorkingDirectoryFileChange
    from deskgit.state.stats import StatsStore

logger = structlog.get_logger()


class RefreshResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: ChangesState
    signal: ConflictSignal | None = None
    version: int


class ChangesStore:
    """Commits reconciled state one refresh at a time.

    The reconcilers are pure; this store is the caller-side serialization
    point. Refreshes hold a lock for the read-compute-commit cycle, and
    externally computed states are committed only against the version they
    were computed from.

    Events are emitted while the lock is held, so subscribers see them in
    version order. A handler must not await ``apply_status``,
    ``select_files`` or ``commit`` on the same store.
    """

    def __init__(
        self,
        *,
        state: ChangesState | None = None,
        stats: StatsStore | None = None,
        event_bus: EventBus | None = None,
        clear_partial_selection: bool = False,
    ) -> None:
        self._state = state or ChangesState()
        self._version = 0
        self._stats = stats
        self._event_bus = event_bus
        self._clear_partial_selection = clear_partial_selection
        self._lock = asyncio.Lock()

    @property
    def state(self) -> ChangesState:
        return self._state

    @property
    def version(self) -> int:
        return self._version

    async def apply_status(
        self,
        status: StatusResult,
        *,
        clear_partial_state: bool | None = None,
    ) -> RefreshResult:
        """Reconcile a fresh status snapshot into the stored state."""
        if clear_partial_state is None:
            clear_partial_state = self._clear_partial_selection

        async with self._lock:
            prev = self._state
            files = update_changed_files(prev, status, clear_partial_state)
            conflicts = update_conflict_state(prev.conflict_state, status)

            new_state = ChangesState(
                working_directory=files.working_directory,
                selection=files.selection,
                conflict_state=conflicts.conflict_state,
            )
            version = self._commit(new_state)

            logger.debug(
                "status_applied",
                version=version,
                files=len(new_state.working_directory.files),
                conflict_kind=new_state.conflict_state.kind if new_state.conflict_state else None,
            )

            if conflicts.signal is not None:
                if self._stats is not None:
                    self._stats.increment(conflicts.signal)
                await self._emit(
                    conflict_event_name(conflicts.signal.value),
                    {
                        "version": version,
                        "current_branch": status.current_branch,
                        "current_tip": status.current_tip,
                    },
                )
            await self._emit(STATUS_APPLIED, {"version": version})

        return RefreshResult(state=new_state, signal=conflicts.signal, version=version)

    async def select_files(
        self, files: list[WorkingDirectoryFileChange] | None = None
    ) -> ChangesState:
        async with self._lock:
            selection = select_working_directory_files(self._state, files)
            new_state = self._state.model_copy(update={"selection": selection})
            version = self._commit(new_state)

            await self._emit(
                SELECTION_CHANGED,
                {"version": version, "selected_file_ids": list(selection.selected_file_ids)},
            )
        return new_state

    async def commit(self, state: ChangesState, *, expected_version: int) -> int:
        """Commit a state computed elsewhere, if nothing was committed since."""
        async with self._lock:
            if expected_version != self._version:
                logger.warning(
                    "stale_state_commit",
                    expected_version=expected_version,
                    current_version=self._version,
                )
                raise StaleStateError(
                    f"state is at version {self._version}, expected {expected_version}"
                )
            return self._commit(state)

    def _commit(self, state: ChangesState) -> int:
        self._state = state
        self._version += 1
        return self._version

    async def _emit(self, name: str, data: dict) -> None:
        if self._event_bus is None:
            return
        await self._event_bus.emit(Event(name=name, data=data))
