"""Tests for the workspace stores."""

from datetime import datetime, timedelta, timezone

import pytest

from debt_engine.scoring.models import SupervisionStatus
from debt_engine.scoring.supervision import SupervisionRecord
from debt_engine.scoring.weights import DEFAULT_WEIGHTS
from debt_engine.storage import HistoryDB, MemoryStore, open_store

T0 = datetime(2025, 3, 1, tzinfo=timezone.utc)


@pytest.fixture(params=["sqlite", "memory"])
def store(request, tmp_path):
    if request.param == "memory":
        yield MemoryStore()
        return
    db = HistoryDB(str(tmp_path))
    db.connect()
    yield db
    db.close()


class TestHistoryDB:
    def test_creates_directory_and_gitignore(self, tmp_path):
        with HistoryDB(str(tmp_path)) as db:
            assert db.db_path.exists()
        gitignore = tmp_path / ".debtengine" / ".gitignore"
        assert gitignore.read_text() == "history.db*\n"

    def test_tables(self, tmp_path):
        with HistoryDB(str(tmp_path)) as db:
            tables = {
                row[0]
                for row in db.conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            }
        expected = {"debt_snapshots", "supervision", "weights", "file_scores", "schema_version"}
        assert expected <= tables

    def test_not_connected(self, tmp_path):
        with pytest.raises(RuntimeError):
            HistoryDB(str(tmp_path)).conn

    def test_survives_reopen(self, tmp_path):
        with HistoryDB(str(tmp_path)) as db:
            db.append_snapshot(40.0, 10, 1, 3, timestamp=T0)
        with HistoryDB(str(tmp_path)) as db:
            snapshots = db.list_snapshots()
        assert len(snapshots) == 1
        assert snapshots[0].timestamp == T0

    def test_file_scores_survive_reopen(self, tmp_path, file_score_factory):
        score = file_score_factory("src/a.py", churn_rate=70.0)
        with HistoryDB(str(tmp_path)) as db:
            db.replace_file_scores([score])
        with HistoryDB(str(tmp_path)) as db:
            assert [s.to_dict() for s in db.load_file_scores()] == [score.to_dict()]

    def test_schema_version(self, tmp_path):
        with HistoryDB(str(tmp_path)) as db:
            db.conn.execute("UPDATE schema_version SET version = 1")
            db.conn.commit()
        with HistoryDB(str(tmp_path)) as db:
            assert db.conn.execute("SELECT version FROM schema_version").fetchone()[0] == 2


class TestSnapshots:
    def test_append_and_list(self, store):
        first = store.append_snapshot(40.0, 10, 1, 3, timestamp=T0)
        store.append_snapshot(45.0, 12, 2, 5, metadata="{}", timestamp=T0 + timedelta(weeks=1))
        snapshots = store.list_snapshots()
        assert [s.composite_score for s in snapshots] == [40.0, 45.0]
        assert snapshots[0].id == first.id
        assert snapshots[1].metadata == "{}"

    def test_limit_keeps_most_recent(self, store):
        for i in range(5):
            store.append_snapshot(float(i), 1, 0, 0, timestamp=T0 + timedelta(days=i))
        assert [s.composite_score for s in store.list_snapshots(limit=2)] == [3.0, 4.0]

    def test_empty(self, store):
        assert store.list_snapshots() == []


class TestSupervision:
    def test_set_and_remove(self, store):
        record = SupervisionRecord("src/a.py", 70.0, "legacy", T0)
        store.set_supervision(record)
        assert store.supervision_records() == {"src/a.py": record}
        assert store.remove_supervision("src/a.py") is True
        assert store.remove_supervision("src/a.py") is False
        assert store.supervision_records() == {}

    def test_replace(self, store):
        store.set_supervision(SupervisionRecord("src/a.py", 70.0, "", T0))
        store.set_supervision(SupervisionRecord("src/a.py", 60.0, "again", T0))
        assert store.supervision_records()["src/a.py"].accepted_score == 60.0


class TestWeights:
    def test_round_trip(self, store):
        assert store.load_weights() is None
        store.save_weights(DEFAULT_WEIGHTS)
        assert store.load_weights() == pytest.approx(dict(DEFAULT_WEIGHTS))
        store.clear_weights()
        assert store.load_weights() is None


class TestFileScores:
    def test_replace_and_load(self, store, file_score_factory):
        a = file_score_factory("src/a.py", churn_rate=80.0, cyclomatic_complexity=30.0)
        b = file_score_factory("src/b.py", test_coverage_gap=60.0).with_supervision(
            SupervisionStatus.ACCEPTABLE
        )
        store.replace_file_scores([b, a])
        loaded = store.load_file_scores()
        assert [s.to_dict() for s in loaded] == [a.to_dict(), b.to_dict()]
        assert loaded[0].composite_score == pytest.approx(a.composite_score)
        assert loaded[0].last_modified == a.last_modified
        assert loaded[1].supervision_status is SupervisionStatus.ACCEPTABLE

    def test_replace_drops_previous(self, store, file_score_factory):
        store.replace_file_scores([file_score_factory("src/a.py")])
        store.replace_file_scores([file_score_factory("src/b.py")])
        assert [s.relative_path for s in store.load_file_scores()] == ["src/b.py"]

    def test_upsert(self, store, file_score_factory):
        store.replace_file_scores([file_score_factory("src/a.py", loc=10)])
        store.upsert_file_score(file_score_factory("src/a.py", loc=25))
        store.upsert_file_score(file_score_factory("src/c.py"))
        loaded = {s.relative_path: s for s in store.load_file_scores()}
        assert loaded["src/a.py"].loc == 25
        assert set(loaded) == {"src/a.py", "src/c.py"}

    def test_empty(self, store):
        assert store.load_file_scores() == []


class TestOpenStore:
    def test_sqlite(self, tmp_path):
        store = open_store(tmp_path)
        try:
            assert isinstance(store, HistoryDB)
        finally:
            store.close()

    def test_falls_back_to_memory(self, tmp_path):
        blocker = tmp_path / "workspace"
        blocker.write_text("not a directory")
        store = open_store(blocker)
        assert isinstance(store, MemoryStore)
