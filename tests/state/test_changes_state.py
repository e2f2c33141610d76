"""Tests for working-directory reconciliation."""

from deskgit.git.models import AppFileStatus, DiffSelectionType, WorkingDirectoryStatus
from deskgit.state.changes import (
    ChangesState,
    StashSelection,
    WorkingDirectorySelection,
    select_working_directory_files,
    update_changed_files,
)


class _Diff:
    """Opaque stand-in for a rendered diff."""


def _state(files=(), selected=(), diff=None):
    return ChangesState(
        working_directory=WorkingDirectoryStatus.from_files(list(files)),
        selection=WorkingDirectorySelection(selected_file_ids=list(selected), diff=diff),
    )


class TestSelectedFileIds:
    def test_defaults_to_first_file_after_sorting(self, make_file, make_status):
        readme = make_file("README.md")
        package = make_file("app/package.json", selection=DiffSelectionType.NONE)
        result = update_changed_files(_state(), make_status([readme, package]), False)
        assert result.selection.selected_file_ids == [package.id]

    def test_remembers_previous_selection(self, make_file, make_status):
        readme = make_file("README.md")
        package = make_file("app/package.json")
        prev = _state([readme, package], selected=[readme.id])
        result = update_changed_files(prev, make_status([readme, package]), False)
        assert result.selection.selected_file_ids == [readme.id]

    def test_filters_missing_ids_without_reset(self, make_file, make_status):
        a, b, c = make_file("a.txt"), make_file("b.txt"), make_file("c.txt")
        prev = _state([a, b, c], selected=[a.id, c.id])
        result = update_changed_files(prev, make_status([a, c]), False)
        assert result.selection.selected_file_ids == [a.id, c.id]

    def test_partial_survivors_kept(self, make_file, make_status):
        a, b = make_file("a.txt"), make_file("b.txt")
        prev = _state([a, b], selected=[a.id, b.id])
        result = update_changed_files(prev, make_status([b]), False)
        assert result.selection.selected_file_ids == [b.id]

    def test_falls_back_when_all_selected_files_gone(self, make_file, make_status):
        a, b = make_file("a.txt"), make_file("b.txt")
        prev = _state([a], selected=[a.id])
        result = update_changed_files(prev, make_status([b]), False)
        assert result.selection.selected_file_ids == [b.id]

    def test_empty_working_directory(self, make_file, make_status):
        a = make_file("a.txt")
        prev = _state([a], selected=[a.id], diff=_Diff())
        result = update_changed_files(prev, make_status([]), False)
        assert result.working_directory.files == []
        assert result.selection.selected_file_ids == []
        assert result.selection.diff is None

    def test_status_change_changes_id(self, make_file, make_status):
        new = make_file("a.txt", status=AppFileStatus.NEW)
        modified = make_file("a.txt", status=AppFileStatus.MODIFIED)
        prev = _state([new], selected=[new.id])
        result = update_changed_files(prev, make_status([modified]), False)
        assert result.selection.selected_file_ids == [modified.id]


class TestDiff:
    def test_kept_for_same_single_file(self, make_file, make_status):
        a = make_file("a.txt")
        b = make_file("b.txt")
        diff = _Diff()
        prev = _state([a], selected=["Modified+a.txt"], diff=diff)

        result = update_changed_files(prev, make_status([a, b]), False)

        assert result.selection.selected_file_ids == ["Modified+a.txt"]
        assert result.selection.diff is diff

    def test_cleared_when_selected_file_unknown(self, make_file, make_status):
        a, b = make_file("a.txt"), make_file("b.txt")
        prev = _state([a, b], selected=["id-from-file-not-in-status"], diff=_Diff())
        result = update_changed_files(prev, make_status([a, b]), False)
        assert result.selection.diff is None

    def test_cleared_when_previous_selection_had_several(self, make_file, make_status):
        a, b = make_file("a.txt"), make_file("b.txt")
        prev = _state([a, b], selected=[a.id, b.id], diff=_Diff())
        result = update_changed_files(prev, make_status([a]), False)
        assert result.selection.selected_file_ids == [a.id]
        assert result.selection.diff is None

    def test_cleared_when_still_several_selected(self, make_file, make_status):
        a, b = make_file("a.txt"), make_file("b.txt")
        prev = _state([a, b], selected=[a.id, b.id], diff=_Diff())
        result = update_changed_files(prev, make_status([a, b]), False)
        assert result.selection.diff is None


class TestFileSelectionCarryOver:
    def test_selection_carried_by_id(self, make_file, make_status):
        prev_file = make_file("a.txt", selection=DiffSelectionType.NONE)
        fresh_file = make_file("a.txt")
        result = update_changed_files(_state([prev_file]), make_status([fresh_file]), False)
        assert result.working_directory.files[0].selection.selection_type is DiffSelectionType.NONE
        assert result.working_directory.include_all is False

    def test_new_files_keep_default_selection(self, make_file, make_status):
        result = update_changed_files(_state(), make_status([make_file("a.txt")]), False)
        assert result.working_directory.files[0].selection.selection_type is DiffSelectionType.ALL

    def test_partial_kept_without_clear(self, make_file, make_status, partial_selection):
        prev_file = make_file("a.txt", selection=partial_selection)
        result = update_changed_files(_state([prev_file]), make_status([make_file("a.txt")]), False)
        assert result.working_directory.files[0].selection == partial_selection
        assert result.working_directory.include_all is None

    def test_partial_reset_with_clear(self, make_file, make_status, partial_selection):
        prev_file = make_file("a.txt", selection=partial_selection)
        result = update_changed_files(_state([prev_file]), make_status([make_file("a.txt")]), True)
        assert result.working_directory.files[0].selection.selection_type is DiffSelectionType.NONE

    def test_clear_leaves_non_partial_selection(self, make_file, make_status):
        prev_file = make_file("a.txt", selection=DiffSelectionType.NONE)
        result = update_changed_files(_state([prev_file]), make_status([make_file("a.txt")]), True)
        assert result.working_directory.files[0].selection.selection_type is DiffSelectionType.NONE

    def test_sorted_case_insensitively(self, make_file, make_status):
        files = [make_file("b.txt"), make_file("A.txt"), make_file("a2.txt"), make_file("C.txt")]
        result = update_changed_files(_state(), make_status(files), False)
        assert [f.path for f in result.working_directory.files] == ["A.txt", "a2.txt", "b.txt", "C.txt"]

    def test_previous_state_not_mutated(self, make_file, make_status):
        prev = _state([make_file("a.txt")])
        update_changed_files(prev, make_status([make_file("b.txt")]), False)
        assert [f.path for f in prev.working_directory.files] == ["a.txt"]
        assert prev.selection.selected_file_ids == []


class TestStashSelection:
    def test_stash_selection_unchanged(self, make_file, make_status):
        stash = StashSelection(selected_stashed_file="notes.md")
        prev = ChangesState(selection=stash)
        result = update_changed_files(prev, make_status([make_file("a.txt")]), False)
        assert result.selection is stash
        assert [f.path for f in result.working_directory.files] == ["a.txt"]


class TestSelectWorkingDirectoryFiles:
    def test_keeps_existing_working_directory_selection(self, make_file):
        a = make_file("a.txt")
        prev = _state([a], selected=[a.id], diff=_Diff())
        assert select_working_directory_files(prev) is prev.selection

    def test_from_stash_selects_first_file(self, make_file):
        a, b = make_file("a.txt"), make_file("b.txt")
        prev = ChangesState(
            working_directory=WorkingDirectoryStatus.from_files([a, b]),
            selection=StashSelection(),
        )
        selection = select_working_directory_files(prev)
        assert selection.selected_file_ids == [a.id]
        assert selection.diff is None

    def test_from_stash_with_no_files(self):
        selection = select_working_directory_files(ChangesState(selection=StashSelection()))
        assert selection.selected_file_ids == []

    def test_explicit_files(self, make_file):
        a, b = make_file("a.txt"), make_file("b.txt")
        prev = _state([a, b], selected=[a.id], diff=_Diff())
        selection = select_working_directory_files(prev, [b])
        assert selection.selected_file_ids == [b.id]
        assert selection.diff is None
