"""Tests for durable state stores."""

import pytest
from datetime import datetime, timezone
from types import SimpleNamespace

from broker.errors import PersistenceFailure
from broker.models.inquiry import InquiryRecord, InquiryStatus, RecentTopicEntry, StateSnapshot
from broker.services.state_store import (
    DuckDBStateStore,
    JsonFileStateStore,
    build_state_store
)


NOW = datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc)


def _snapshot() -> StateSnapshot:
    return StateSnapshot(
        counter=2,
        inquiries={
            1: InquiryRecord(1, "LAPTOP", "need laptop", NOW, InquiryStatus.CLOSED),
            2: InquiryRecord(2, "MOUSE", "need mouse", NOW, responses=["r1"]),
        },
        recent_topics={
            "MOUSE": RecentTopicEntry("MOUSE", "need mouse", NOW, 2),
        }
    )


@pytest.fixture(params=["json", "duckdb"])
def store(request, tmp_path):
    """Provide each store backend rooted in tmp_path."""
    if request.param == "json":
        s = JsonFileStateStore(str(tmp_path / "state" / "query_state.json"))
    else:
        s = DuckDBStateStore(str(tmp_path / "broker.db"))
    yield s
    s.close()


class TestStateStore:
    """Behavior shared by every backend."""

    def test_load_empty(self, store):
        """Nothing persisted loads as an empty snapshot."""
        snapshot = store.load()
        assert snapshot.counter == 0
        assert snapshot.inquiries == {}
        assert snapshot.recent_topics == {}

    def test_save_then_load(self, store):
        """Saved state reads back unchanged."""
        store.save(_snapshot())
        loaded = store.load()
        assert loaded.counter == 2
        assert loaded.inquiries[1].status == InquiryStatus.CLOSED
        assert loaded.inquiries[2].responses == ["r1"]
        assert loaded.inquiries[2].issued_at == NOW
        assert loaded.recent_topics["MOUSE"].sequence_number == 2

    def test_save_replaces_previous(self, store):
        """Each save replaces the whole snapshot."""
        store.save(_snapshot())
        store.save(StateSnapshot(counter=7))
        loaded = store.load()
        assert loaded.counter == 7
        assert loaded.inquiries == {}
        assert loaded.recent_topics == {}


class TestJsonFileStateStore:
    """SUT: JsonFileStateStore"""

    def test_corrupt_file_raises(self, tmp_path):
        """Unparseable JSON raises PersistenceFailure."""
        path = tmp_path / "query_state.json"
        path.write_text("{not json")
        with pytest.raises(PersistenceFailure):
            JsonFileStateStore(str(path)).load()

    def test_no_tmp_file_left(self, tmp_path):
        """The atomic write leaves no temporary file behind."""
        path = tmp_path / "query_state.json"
        JsonFileStateStore(str(path)).save(_snapshot())
        assert path.exists()
        assert not (tmp_path / "query_state.json.tmp").exists()


class TestBuildStateStore:
    """SUT: build_state_store"""

    def test_json_backend(self, tmp_path):
        """The json backend builds a JsonFileStateStore."""
        settings = SimpleNamespace(state_backend="json", state_file=str(tmp_path / "s.json"))
        assert isinstance(build_state_store(settings), JsonFileStateStore)

    def test_unknown_backend(self):
        """An unknown backend name is rejected."""
        with pytest.raises(ValueError):
            build_state_store(SimpleNamespace(state_backend="redis"))
