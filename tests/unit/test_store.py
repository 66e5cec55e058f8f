"""
Unit tests for the in-memory user store.
"""

import threading

import pytest

from crudapi.store import User, UserStore, UserNotFound, StoreError, parse_user_id


class TestCreate:

    def test_first_id_is_one(self, store: UserStore):
        user = store.create("John Doe", "john@example.com")

        assert user == User(id=1, name="John Doe", email="john@example.com")

    def test_ids_strictly_increase(self, store: UserStore):
        ids = [store.create(f"u{i}", f"u{i}@x").id for i in range(5)]

        assert ids == [1, 2, 3, 4, 5]
        assert store.next_id == 6

    def test_ids_not_reused_after_delete(self, store: UserStore):
        store.create("A", "a@x")
        second = store.create("B", "b@x")
        store.delete_by_id(second.id)

        assert store.create("C", "c@x").id == 3

    def test_missing_fields_stored_as_none(self, store: UserStore):
        user = store.create(None, None)

        assert user.to_dict() == {"id": 1, "name": None, "email": None}

    def test_values_stored_as_given(self, store: UserStore):
        user = store.create(42, ["not", "an", "email"])

        assert store.find_by_id(user.id).name == 42


class TestRead:

    def test_list_empty(self, store: UserStore):
        assert store.list_all() == []

    def test_list_in_creation_order(self, store: UserStore):
        for name in ("A", "B", "C"):
            store.create(name, f"{name}@x")

        assert [u.name for u in store.list_all()] == ["A", "B", "C"]
        assert len(store) == 3

    def test_find_by_id(self, store: UserStore):
        store.create("A", "a@x")
        b = store.create("B", "b@x")

        assert store.find_by_id(b.id) == b

    @pytest.mark.parametrize("raw", ["2", " 2 ", "2.0", "2e0", 2.0])
    def test_find_by_equivalent_id(self, store: UserStore, raw):
        store.create("A", "a@x")
        store.create("B", "b@x")

        assert store.find_by_id(raw).name == "B"

    @pytest.mark.parametrize("raw", [99, "99", "abc", "", "1.5", None])
    def test_find_missing(self, store: UserStore, raw):
        store.create("A", "a@x")

        with pytest.raises(UserNotFound) as exc_info:
            store.find_by_id(raw)

        assert exc_info.value.user_id == raw
        assert isinstance(exc_info.value, StoreError)

    def test_returned_records_are_copies(self, store: UserStore):
        user = store.create("A", "a@x")
        user.name = "mutated"
        store.list_all()[0].email = "mutated"

        assert store.find_by_id(1) == User(id=1, name="A", email="a@x")


class TestUpdate:

    def test_update_replaces_name_and_email(self, store: UserStore):
        store.create("Alice", "a@x")

        updated = store.update_by_id("1", "Alice B", "ab@x")

        assert updated == User(id=1, name="Alice B", email="ab@x")
        assert store.find_by_id(1) == updated

    def test_update_with_missing_fields_nulls_them(self, store: UserStore):
        store.create("Alice", "a@x")

        assert store.update_by_id(1, None, None).to_dict() == {"id": 1, "name": None, "email": None}

    def test_update_missing_changes_nothing(self, store: UserStore):
        store.create("Alice", "a@x")

        with pytest.raises(UserNotFound):
            store.update_by_id(99, "X", "Y")

        assert store.list_all() == [User(id=1, name="Alice", email="a@x")]
        assert store.next_id == 2

    def test_update_keeps_position(self, store: UserStore):
        store.create("A", "a@x")
        store.create("B", "b@x")
        store.update_by_id(1, "A2", "a2@x")

        assert [u.name for u in store.list_all()] == ["A2", "B"]


class TestDelete:

    def test_delete_removes(self, store: UserStore):
        store.create("A", "a@x")
        store.create("B", "b@x")

        store.delete_by_id("1")

        assert [u.id for u in store.list_all()] == [2]
        with pytest.raises(UserNotFound):
            store.find_by_id(1)

    def test_delete_is_idempotent(self, store: UserStore):
        store.create("A", "a@x")
        store.create("B", "b@x")

        store.delete_by_id(1)
        store.delete_by_id(1)
        store.delete_by_id(1)

        assert len(store) == 1

    @pytest.mark.parametrize("raw", [999, "abc", "", None])
    def test_delete_unknown_is_noop(self, store: UserStore, raw):
        store.create("A", "a@x")

        store.delete_by_id(raw)

        assert len(store) == 1


class TestConcurrency:

    def test_concurrent_creates_get_unique_ids(self, store: UserStore):
        def worker():
            for _ in range(50):
                store.create("n", "e")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        ids = [u.id for u in store.list_all()]
        assert ids == list(range(1, 401))


class TestParseUserId:

    @pytest.mark.parametrize("raw, expected", [
        (7, 7),
        ("7", 7),
        (" 7\n", 7),
        ("-3", -3),
        ("007", 7),
        ("7.0", 7),
        ("1e2", 100),
        (7.0, 7),
    ])
    def test_valid(self, raw, expected):
        assert parse_user_id(raw) == expected

    @pytest.mark.parametrize("raw", [
        "abc", "", "   ", "7.5", 7.5, "nan", "inf", True, False, None, [], {},
        "1_0", "\uff11", "\u0661", "0x1", "0b1", "0o1", "1e999",
    ])
    def test_invalid(self, raw):
        assert parse_user_id(raw) is None
