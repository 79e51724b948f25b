import logging

import pytest

from conftest import T0
from extshim.core.datastore import JsonKeyValueStore, MemoryKeyValueStore
from extshim.services.viewed_state import (
    FIRST_SEEN_TIME,
    LAST_NOTIFICATION_TIME,
    VIEWED_NOTIFICATIONS,
    ViewedStateStore,
)


@pytest.fixture
def viewed(clock, kv_store):
    return ViewedStateStore(kv_store, clock)


def test_last_check_time_bootstraps_to_now(viewed, kv_store, clock):
    assert viewed.get_last_check_time() == T0
    assert kv_store.get_item(LAST_NOTIFICATION_TIME) == T0
    assert kv_store.get_item(FIRST_SEEN_TIME) == T0

    clock.advance(5000)
    assert viewed.get_last_check_time() == T0


def test_record_check_keeps_first_seen(viewed, kv_store):
    viewed.record_check(T0 + 10)
    viewed.record_check(T0 + 20)
    state = viewed.load()
    assert state.last_check_timestamp == T0 + 20
    assert state.first_seen_timestamp == T0 + 10


def test_mark_viewed_is_idempotent_and_append_only(viewed, kv_store):
    assert viewed.mark_viewed("a") is True
    assert viewed.mark_viewed("b") is True
    assert viewed.mark_viewed("a") is False
    assert kv_store.get_item(VIEWED_NOTIFICATIONS) == ["a", "b"]
    assert viewed.is_viewed("a")
    assert not viewed.is_viewed("c")


@pytest.mark.parametrize(
    "raw_ids, raw_time",
    [
        ("not-a-list", "yesterday"),
        ({"a": 1}, -5),
        ([1, None, ""], True),
    ],
)
def test_malformed_values_read_as_absent(clock, raw_ids, raw_time):
    store = MemoryKeyValueStore({VIEWED_NOTIFICATIONS: raw_ids, LAST_NOTIFICATION_TIME: raw_time})
    viewed = ViewedStateStore(store, clock)

    assert viewed.viewed_ids() == []
    assert viewed.load().last_check_timestamp is None
    assert viewed.get_last_check_time() == T0


def test_duplicates_in_stored_list_are_collapsed(clock):
    store = MemoryKeyValueStore({VIEWED_NOTIFICATIONS: ["a", "a", "b"]})
    viewed = ViewedStateStore(store, clock)
    assert viewed.viewed_ids() == ["a", "b"]
    viewed.mark_viewed("c")
    assert store.get_item(VIEWED_NOTIFICATIONS) == ["a", "b", "c"]


def test_read_failure_falls_back_to_defaults(clock, mocker, caplog):
    store = mocker.Mock()
    store.get_item.side_effect = OSError("gone")
    viewed = ViewedStateStore(store, clock)

    with caplog.at_level(logging.WARNING):
        assert viewed.viewed_ids() == []
        assert viewed.is_viewed("a") is False
    assert "treating as absent" in caplog.text


def test_write_failure_is_logged_not_raised(clock, mocker, caplog):
    store = mocker.Mock()
    store.get_item.return_value = None
    store.set_item.side_effect = OSError("read-only")
    viewed = ViewedStateStore(store, clock)

    with caplog.at_level(logging.WARNING):
        assert viewed.mark_viewed("a") is False
        assert viewed.get_last_check_time() == T0
    assert "Failed to write" in caplog.text


def test_mark_viewed_after_failed_read_keeps_existing_ids(clock, mocker):
    store = MemoryKeyValueStore({VIEWED_NOTIFICATIONS: ["c1"]})
    viewed = ViewedStateStore(store, clock)
    mocker.patch.object(store, "get_item", side_effect=OSError("transient"))

    assert viewed.mark_viewed("c2") is False

    mocker.stopall()
    assert store.get_item(VIEWED_NOTIFICATIONS) == ["c1"]
    assert viewed.mark_viewed("c2") is True
    assert store.get_item(VIEWED_NOTIFICATIONS) == ["c1", "c2"]


def test_mark_viewed_does_not_clobber_unparsable_json_file(clock, tmp_path, caplog):
    path = tmp_path / "storage.json"
    path.write_text('{"viewed-notifications": ["c1"]', encoding="utf-8")
    viewed = ViewedStateStore(JsonKeyValueStore(path), clock)

    with caplog.at_level(logging.WARNING):
        assert viewed.mark_viewed("c2") is False
    assert path.read_text(encoding="utf-8") == '{"viewed-notifications": ["c1"]'
    assert "Failed to write" in caplog.text
