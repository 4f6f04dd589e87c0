import pytest

from services.editor import AllocationEditor
from services.errors import BudgetError, CommitInProgressError, ConflictError, InvalidAllocationError


def test_starts_from_saved_then_defaults(categories):
    editor = AllocationEditor(categories, {"necesidades": 60, "gustos": 20})
    assert editor.allocation == {"necesidades": 60.0, "gustos": 20.0, "ahorro": 20.0}
    assert editor.can_commit


def test_drag_rescales_other_sliders(categories):
    editor = AllocationEditor(categories)
    editor.drag("necesidades", 70)
    assert editor.allocation["gustos"] == pytest.approx(18)
    assert editor.allocation["ahorro"] == pytest.approx(12)
    assert editor.can_commit


def test_preset_replaces_allocation(categories):
    editor = AllocationEditor(categories)
    editor.drag("gustos", 5)
    editor.select_preset([70, 20, 10])
    assert editor.allocation == {"necesidades": 70.0, "gustos": 20.0, "ahorro": 10.0}


def test_commit_passes_full_allocation_to_save(categories):
    editor = AllocationEditor(categories)
    saved = []

    result = editor.commit(lambda pairs: saved.append(pairs) or "ok")

    assert result == "ok"
    assert saved == [[
        {"category_id": "necesidades", "percentage": 50.0},
        {"category_id": "gustos", "percentage": 30.0},
        {"category_id": "ahorro", "percentage": 20.0},
    ]]


def test_invalid_total_never_reaches_save(categories):
    editor = AllocationEditor(categories, {"ahorro": 19})
    calls = []

    assert not editor.can_commit
    with pytest.raises(InvalidAllocationError):
        editor.commit(calls.append)
    assert calls == []


def test_only_one_commit_in_flight(categories):
    editor = AllocationEditor(categories)

    def save(pairs):
        assert not editor.can_commit
        with pytest.raises(CommitInProgressError):
            editor.commit(lambda _: None)
        return "first"

    assert editor.commit(save) == "first"
    assert editor.can_commit


def test_rejected_save_keeps_allocation_for_retry(categories):
    editor = AllocationEditor(categories)
    editor.select_preset([60, 20, 20])

    def reject(pairs):
        raise ConflictError("concurrent update")

    with pytest.raises(ConflictError):
        editor.commit(reject)

    assert editor.allocation == {"necesidades": 60.0, "gustos": 20.0, "ahorro": 20.0}
    assert editor.can_commit


def test_cancel_discards_without_saving(categories):
    editor = AllocationEditor(categories)
    editor.drag("ahorro", 40)
    editor.cancel()
    assert editor.closed
    assert editor.allocation == {}


def test_cancelled_session_rejects_edits(categories):
    editor = AllocationEditor(categories)
    editor.cancel()
    calls = []

    with pytest.raises(BudgetError, match="closed"):
        editor.drag("ahorro", 40)
    with pytest.raises(BudgetError, match="closed"):
        editor.select_preset([50, 30, 20])
    with pytest.raises(BudgetError, match="closed"):
        editor.commit(calls.append)
    assert editor.allocation == {}
    assert calls == []
