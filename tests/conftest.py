"""Shared fixtures for deskgit tests."""

from __future__ import annotations

import os

import pytest

from deskgit.core.config import DeskgitConfig
from deskgit.core.events import EventBus
from deskgit.git.models import (
    AppFileStatus,
    DiffSelection,
    DiffSelectionType,
    StatusResult,
    WorkingDirectoryFileChange,
    WorkingDirectoryStatus,
)
from deskgit.state.stats import InMemoryStatsStore


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Prevent .env file and shell env from leaking into tests."""
    monkeypatch.setitem(DeskgitConfig.model_config, "env_file", None)
    for key in list(os.environ):
        if key.startswith("DESKGIT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_file():
    def _make(
        path: str,
        status: AppFileStatus = AppFileStatus.MODIFIED,
        selection: DiffSelectionType | DiffSelection = DiffSelectionType.ALL,
    ) -> WorkingDirectoryFileChange:
        if isinstance(selection, DiffSelectionType):
            selection = DiffSelection.from_initial_selection(selection)
        return WorkingDirectoryFileChange(path=path, status=status, selection=selection)

    return _make


@pytest.fixture
def make_status():
    def _make(files: list[WorkingDirectoryFileChange] | None = None, **kwargs) -> StatusResult:
        return StatusResult(
            working_directory=WorkingDirectoryStatus.from_files(files or []),
            **kwargs,
        )

    return _make


@pytest.fixture
def partial_selection():
    return DiffSelection.from_initial_selection(DiffSelectionType.ALL).with_line_selection(
        3, False
    )


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def stats():
    return InMemoryStatsStore()
