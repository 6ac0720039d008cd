"""Testes para application/message_store.py.

Valida ordenação, reconciliação de otimistas e merge do resync.
"""

from __future__ import annotations

import random

from brainmate_chat.application.message_store import MessageStore, order_confirmed
from brainmate_chat.domain.messages import MessageRole
from tests.helpers.builders import make_message


def _ids(store: MessageStore) -> list[int | str]:
    return [m.id for m in store.messages]


def _assert_invariants(store: MessageStore) -> None:
    """Confirmadas ordenadas por timestamp; otimistas sempre no fim."""
    entries = store.messages
    flags = [m.is_optimistic for m in entries]
    assert flags == sorted(flags), "otimista antes de confirmada"
    stamps = [m.timestamp for m in entries if not m.is_optimistic and m.timestamp is not None]
    assert stamps == sorted(stamps)


class TestOrderConfirmed:
    def test_sorts_by_timestamp(self) -> None:
        ordered = order_confirmed([make_message(2, minute=5), make_message(1, minute=1)])
        assert [m.id for m in ordered] == [1, 2]

    def test_ties_keep_insertion_order(self) -> None:
        ordered = order_confirmed([make_message(9, minute=3), make_message(4, minute=3)])
        assert [m.id for m in ordered] == [9, 4]

    def test_missing_timestamp_follows_predecessor(self) -> None:
        ordered = order_confirmed(
            [make_message(1, minute=1), make_message(2), make_message(3, minute=2)]
        )
        assert [m.id for m in ordered] == [1, 2, 3]


class TestAppend:
    def test_optimistic_goes_to_tail(self) -> None:
        store = MessageStore()
        store.append(make_message("temp-1", optimistic=True))
        store.append(make_message(5, minute=1))

        assert _ids(store) == [5, "temp-1"]
        _assert_invariants(store)

    def test_confirmed_duplicate_id_is_replaced(self) -> None:
        store = MessageStore()
        store.append(make_message(5, "old", minute=1))
        store.append(make_message(5, "new", minute=1))

        assert len(store) == 1
        assert store.messages[0].content == "new"

    def test_confirmed_append_bumps_revision(self) -> None:
        store = MessageStore()
        store.append(make_message("temp-1", optimistic=True))
        assert store.revision == 0
        store.append(make_message(1, minute=0))
        assert store.revision == 1


class TestReplaceOptimistic:
    def test_replaces_placeholder_with_confirmed_pair(self) -> None:
        store = MessageStore()
        store.append(make_message("temp-1", optimistic=True))

        store.replace_optimistic(
            "temp-1",
            [make_message(10, minute=0), make_message(11, "Hello!", MessageRole.ASSISTANT, minute=1)],
        )

        assert _ids(store) == [10, 11]
        assert store.optimistic == ()

    def test_other_optimistic_entries_survive(self) -> None:
        store = MessageStore()
        store.append(make_message("temp-1", optimistic=True))
        store.append(make_message("temp-2", optimistic=True))

        store.replace_optimistic("temp-1", [make_message(10, minute=0)])

        assert _ids(store) == [10, "temp-2"]

    def test_unknown_temp_id_appends_without_duplicates(self) -> None:
        store = MessageStore()
        store.append(make_message(10, minute=0))

        store.replace_optimistic("temp-99", [make_message(10, minute=0), make_message(11, minute=1)])

        assert _ids(store) == [10, 11]


class TestRemoveOptimistic:
    def test_removes_only_matching_placeholder(self) -> None:
        store = MessageStore()
        store.append(make_message(1, minute=0))
        store.append(make_message("temp-1", optimistic=True))

        assert store.remove_optimistic("temp-1") is True
        assert _ids(store) == [1]

    def test_unknown_id_is_noop(self) -> None:
        store = MessageStore()
        store.append(make_message("temp-1", optimistic=True))
        seen: list[int] = []
        store.subscribe(lambda snapshot: seen.append(len(snapshot)))

        assert store.remove_optimistic("temp-2") is False
        assert _ids(store) == ["temp-1"]
        assert seen == []


class TestMergeFromServer:
    def test_resync_keeps_pending_input(self) -> None:
        store = MessageStore()
        store.append(make_message(1, minute=0))
        store.append(make_message("temp-3", "pending", optimistic=True))

        applied = store.merge_from_server([make_message(1, minute=0), make_message(2, minute=1)])

        assert applied is True
        assert _ids(store) == [1, 2, "temp-3"]

    def test_server_list_without_timestamps_keeps_server_order(self) -> None:
        store = MessageStore()
        store.append(make_message("temp-3", optimistic=True))

        store.merge_from_server([make_message(1), make_message(2)])

        assert _ids(store) == [1, 2, "temp-3"]

    def test_server_list_replaces_confirmed_set(self) -> None:
        store = MessageStore()
        store.append(make_message(1, minute=0))
        store.append(make_message(2, minute=1))

        store.merge_from_server([make_message(2, minute=1)])

        assert _ids(store) == [2]

    def test_stale_snapshot_is_discarded(self) -> None:
        store = MessageStore()
        store.append(make_message("temp-1", optimistic=True))
        base = store.revision

        # Envio reconciliado enquanto o GET estava em voo
        store.replace_optimistic("temp-1", [make_message(10, minute=0), make_message(11, minute=1)])
        applied = store.merge_from_server([], base_revision=base)

        assert applied is False
        assert _ids(store) == [10, 11]

    def test_current_revision_applies(self) -> None:
        store = MessageStore()
        applied = store.merge_from_server([make_message(1, minute=0)], base_revision=store.revision)
        assert applied is True
        assert _ids(store) == [1]

    def test_identical_list_does_not_notify(self) -> None:
        store = MessageStore()
        store.merge_from_server([make_message(1, minute=0)])
        calls: list[int] = []
        store.subscribe(lambda snapshot: calls.append(len(snapshot)))

        store.merge_from_server([make_message(1, minute=0)])

        assert calls == []


class TestStoreLifecycle:
    def test_clear_drops_everything(self) -> None:
        store = MessageStore()
        store.append(make_message(1, minute=0))
        store.append(make_message("temp-1", optimistic=True))

        store.clear()

        assert store.messages == ()

    def test_unsubscribe_stops_notifications(self) -> None:
        store = MessageStore()
        calls: list[int] = []
        unsubscribe = store.subscribe(lambda snapshot: calls.append(len(snapshot)))
        store.append(make_message(1, minute=0))
        unsubscribe()
        store.append(make_message(2, minute=1))

        assert calls == [1]

    def test_find(self) -> None:
        store = MessageStore()
        store.append(make_message(1, "a", minute=0))
        assert store.find(1) is not None
        assert store.find(2) is None


def test_ordering_holds_under_random_operations() -> None:
    """Sequência aleatória de operações nunca quebra a ordenação."""
    rng = random.Random(1234)
    store = MessageStore()
    next_server_id = 1
    next_temp = 1
    server_side: list = []

    for _ in range(300):
        op = rng.choice(["send", "confirm", "fail", "resync"])
        pending = [m.id for m in store.optimistic]
        if op == "send":
            store.append(make_message(f"temp-{next_temp}", optimistic=True))
            next_temp += 1
        elif op == "confirm" and pending:
            temp_id = rng.choice(pending)
            pair = [
                make_message(next_server_id, minute=next_server_id % 60),
                make_message(next_server_id + 1, minute=(next_server_id + 1) % 60),
            ]
            next_server_id += 2
            server_side.extend(pair)
            store.replace_optimistic(temp_id, pair)
        elif op == "fail" and pending:
            store.remove_optimistic(rng.choice(pending))
        elif op == "resync":
            store.merge_from_server(list(server_side))

        _assert_invariants(store)
        assert len(store.optimistic) == len({m.id for m in store.optimistic})
