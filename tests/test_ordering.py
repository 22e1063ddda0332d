# tests/test_ordering.py

from __future__ import annotations

import pytest

from taskboard.core.state import AppState
from taskboard.errors import PersistenceError, ValidationError
from taskboard.storage.database import Database


def _orders(db: Database, user_id: int) -> dict[int, int]:
    rows = db.fetch_all('SELECT id, "order" FROM tasks WHERE user_id = ?', (user_id,))
    return {int(r["id"]): int(r["order"]) for r in rows}


def _add(state: AppState, user_id: int, title: str) -> int:
    order = state.ordering.next_order(user_id)
    return state.task_store.add_task(user_id=user_id, title=title, order=order).id


def test_next_order_is_zero_for_empty_user(state: AppState) -> None:
    assert state.ordering.next_order(1) == 0


def test_next_order_dense_after_n_appends(state: AppState, db: Database) -> None:
    for i in range(5):
        _add(state, 1, f"t{i}")
    _add(state, 2, "other user")

    assert sorted(_orders(db, 1).values()) == [0, 1, 2, 3, 4]
    assert state.ordering.next_order(1) == 5
    assert state.ordering.next_order(2) == 1


def test_next_order_follows_max_not_count(state: AppState) -> None:
    state.task_store.add_task(user_id=1, title="a", order=7)
    assert state.ordering.next_order(1) == 8


def test_reorder_first_page(state: AppState, db: Database) -> None:
    ids = [_add(state, 1, f"t{i}") for i in range(3)]

    updated = state.ordering.reorder(1, [ids[2], ids[0], ids[1]], page=1, page_size=10)

    assert updated == 3
    assert _orders(db, 1) == {ids[2]: 0, ids[0]: 1, ids[1]: 2}


def test_reorder_uses_page_window_offset(state: AppState, db: Database) -> None:
    ids = [_add(state, 1, f"t{i}") for i in range(4)]

    state.ordering.reorder(1, [ids[3], ids[2]], page=2, page_size=2)

    orders = _orders(db, 1)
    assert orders[ids[3]] == 2
    assert orders[ids[2]] == 3
    # The first page window is untouched.
    assert orders[ids[0]] == 0
    assert orders[ids[1]] == 1


def test_reorder_skips_foreign_and_missing_ids(state: AppState, db: Database) -> None:
    mine = [_add(state, 1, "a"), _add(state, 1, "b")]
    theirs = _add(state, 2, "not yours")

    updated = state.ordering.reorder(1, [theirs, mine[1], 9999, mine[0]], page=1, page_size=10)

    assert updated == 2
    assert _orders(db, 2) == {theirs: 0}
    assert _orders(db, 1) == {mine[1]: 1, mine[0]: 3}


def test_reorder_empty_list_is_noop(state: AppState, db: Database) -> None:
    ids = [_add(state, 1, "a"), _add(state, 1, "b")]
    assert state.ordering.reorder(1, [], page=1, page_size=10) == 0
    assert _orders(db, 1) == {ids[0]: 0, ids[1]: 1}


@pytest.mark.parametrize("ordered_ids", [None, "1,2", {"a": 1}, 5])
def test_reorder_rejects_non_list(state: AppState, ordered_ids) -> None:
    with pytest.raises(ValidationError):
        state.ordering.reorder(1, ordered_ids, page=1, page_size=10)


@pytest.mark.parametrize("page,page_size", [(0, 10), (-1, 10), (1, 0), ("2", 10), (True, 10)])
def test_reorder_rejects_bad_page(state: AppState, page, page_size) -> None:
    with pytest.raises(ValidationError):
        state.ordering.reorder(1, [1], page=page, page_size=page_size)


def test_reorder_is_all_or_nothing(state: AppState, db: Database) -> None:
    ids = [_add(state, 1, f"t{i}") for i in range(3)]
    before = _orders(db, 1)

    # Make the update of the last id in the batch fail inside the transaction.
    conn = db._get_conn()
    try:
        conn.execute(
            f"""
            CREATE TRIGGER fail_reorder BEFORE UPDATE OF "order" ON tasks
            WHEN NEW.id = {ids[0]}
            BEGIN
                SELECT RAISE(ABORT, 'boom');
            END
            """
        )
    finally:
        conn.close()

    with pytest.raises(PersistenceError):
        state.ordering.reorder(1, [ids[2], ids[1], ids[0]], page=1, page_size=10)

    assert _orders(db, 1) == before


def test_reorder_with_out_of_range_id_rolls_back(state: AppState, db: Database) -> None:
    ids = [_add(state, 1, f"t{i}") for i in range(2)]
    before = _orders(db, 1)

    with pytest.raises(PersistenceError):
        state.ordering.reorder(1, [ids[1], 2**70, ids[0]], page=1, page_size=10)

    assert _orders(db, 1) == before
