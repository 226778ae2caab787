import pytest

from research_queue_planner import UndoHistory


def test_undo_and_redo_walk_the_stacks():
    history = UndoHistory(())
    history.push(("A",))
    history.push(("A", "B"))

    assert history.current == ("A", "B")
    assert history.undo() == ("A",)
    assert history.undo() == ()
    assert history.undo() is None
    assert history.redo() == ("A",)
    assert history.redo() == ("A", "B")
    assert history.redo() is None


def test_push_clears_redo():
    history = UndoHistory(())
    history.push(("A",))
    history.undo()

    assert history.can_redo
    history.push(("B",))

    assert not history.can_redo
    assert history.current == ("B",)


def test_limit_evicts_oldest_snapshots():
    history = UndoHistory((), limit=3)
    for snapshot in [("A",), ("A", "B"), ("A", "B", "C")]:
        history.push(snapshot)

    assert history.undo() == ("A", "B")
    assert history.undo() == ("A",)
    assert history.undo() is None


def test_clear_resets_to_a_single_snapshot():
    history = UndoHistory(())
    history.push(("A",))
    history.undo()

    history.clear(("Z",))

    assert history.current == ("Z",)
    assert not history.can_undo
    assert not history.can_redo


def test_limit_must_be_positive():
    with pytest.raises(ValueError):
        UndoHistory((), limit=0)
