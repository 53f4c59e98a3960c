from __future__ import annotations

import pytest

from mintrange.state.journal import Journal
from mintrange.state.storage import StateStore


def test_atomic_commits_to_store() -> None:
    store = StateStore()
    j = Journal(store)
    with j.atomic():
        j.set(("meta", "a"), 1)
        j.set(("meta", "b"), 2)
        assert store.get(("meta", "a")) is None
        assert j.get(("meta", "a")) == 1
    assert store.get(("meta", "a")) == 1
    assert store.get(("meta", "b")) == 2
    assert j.depth() == 0


def test_atomic_reverts_on_error() -> None:
    store = StateStore()
    j = Journal(store)
    with j.atomic():
        j.set(("k",), "before")

    with pytest.raises(ZeroDivisionError):
        with j.atomic():
            j.set(("k",), "after")
            j.set(("other",), 1)
            1 / 0

    assert store.get(("k",)) == "before"
    assert not store.has(("other",))
    assert j.depth() == 0


def test_nested_checkpoints_revert_inner_only() -> None:
    j = Journal(StateStore())
    outer = j.begin()
    j.set(("x",), 1)
    j.begin()
    j.set(("x",), 2)
    j.set(("y",), 3)
    assert j.get(("x",)) == 2
    j.revert()
    assert j.get(("x",)) == 1
    assert j.get(("y",)) is None
    j.commit_to(outer)
    assert j.store.get(("x",)) == 1


def test_delete_shadows_lower_layers() -> None:
    store = StateStore()
    j = Journal(store)
    with j.atomic():
        j.set(("ns", 1), "a")
        j.set(("ns", 2), "b")
    with j.atomic():
        j.delete(("ns", 1))
        assert not j.has(("ns", 1))
        assert [k for k, _ in j.items(("ns",))] == [("ns", 2)]
    assert not store.has(("ns", 1))


def test_writes_require_checkpoint() -> None:
    j = Journal(StateStore())
    with pytest.raises(RuntimeError):
        j.set(("x",), 1)
    with pytest.raises(RuntimeError):
        j.commit()


def test_none_values_are_rejected() -> None:
    j = Journal(StateStore())
    with j.atomic():
        with pytest.raises(ValueError):
            j.set(("x",), None)


def test_pending_keys_and_export() -> None:
    j = Journal(StateStore())
    j.begin()
    j.set(("a",), 1)
    j.begin()
    j.set(("b",), 2)
    j.set(("a",), 3)
    assert j.pending_keys() == 3
    j.commit_to(0)
    assert j.pending_keys() == 0
    assert j.store.export() == {("a",): 3, ("b",): 2}
