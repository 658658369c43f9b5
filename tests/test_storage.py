"""Unit tests for MigrationStore and JsonFileStore."""

import json

import pytest

from dbmt.exceptions import StoreError
from dbmt.models import LogLevel, MigrationStatus, MigrationType
from dbmt.storage import JsonFileStore, MigrationStore, create_store


def _create(store, name="orders", status=MigrationStatus.PENDING):
    return store.create_migration(
        name=name,
        source_db_type="postgresql",
        target_db_type="mongodb",
        source_config={"type": "postgresql"},
        target_config={"type": "mongodb"},
        migration_type=MigrationType.FULL,
        status=status,
        created_by="user-1",
    )


# ── Tests: Migrations ─────────────────────────────────────────────────────


class TestMigrations:

    def test_create_assigns_id_and_defaults(self):
        store = MigrationStore()
        migration = _create(store)

        assert migration.id
        assert migration.progress_percentage == 0
        assert migration.status == MigrationStatus.PENDING
        assert store.get_migration(migration.id) is migration

    def test_get_unknown_returns_none(self):
        assert MigrationStore().get_migration("missing") is None

    def test_list_is_newest_first(self):
        store = MigrationStore()
        first = _create(store, "first")
        second = _create(store, "second")
        third = _create(store, "third")

        assert [m.id for m in store.list_migrations()] == [third.id, second.id, first.id]

    def test_update_sets_columns_and_timestamp(self):
        store = MigrationStore()
        migration = _create(store)

        updated = store.update_migration(
            migration.id, progress_percentage=43, status="running"
        )

        assert updated.progress_percentage == 43
        assert updated.status == MigrationStatus.RUNNING
        assert updated.updated_at is not None

    def test_update_unknown_migration(self):
        with pytest.raises(StoreError, match="not found"):
            MigrationStore().update_migration("missing", progress_percentage=10)

    def test_update_rejects_unknown_and_immutable_columns(self):
        store = MigrationStore()
        migration = _create(store)

        with pytest.raises(StoreError, match="Unknown migration columns"):
            store.update_migration(migration.id, colour="blue")
        with pytest.raises(StoreError):
            store.update_migration(migration.id, id="other")

    def test_row_dict_shape(self):
        row = _create(MigrationStore()).to_dict()

        assert row["source_db_type"] == "postgresql"
        assert row["migration_type"] == "full"
        assert row["status"] == "pending"
        assert row["created_by"] == "user-1"
        assert row["updated_at"] is None


# ── Tests: Logs and Reports ───────────────────────────────────────────────


class TestReferences:

    def test_logs_in_insertion_order(self):
        store = MigrationStore()
        migration = _create(store)
        store.add_log(migration.id, "first")
        store.add_log(migration.id, "second", level=LogLevel.WARNING, details={"a": 1})

        logs = store.list_logs(migration.id)
        assert [entry.message for entry in logs] == ["first", "second"]
        assert logs[1].level == LogLevel.WARNING
        assert logs[1].details == {"a": 1}

    def test_log_requires_existing_migration(self):
        with pytest.raises(StoreError, match="foreign key"):
            MigrationStore().add_log("missing", "hello")

    def test_report_requires_existing_migration(self):
        with pytest.raises(StoreError, match="foreign key"):
            MigrationStore().add_validation_report("missing", "row_count")

    def test_reports_newest_first_and_scoped(self):
        store = MigrationStore()
        migration = _create(store)
        other = _create(store, "other")
        older = store.add_validation_report(migration.id, "row_count", is_valid=True)
        newer = store.add_validation_report(migration.id, "checksum", is_valid=True)
        store.add_validation_report(other.id, "checksum")

        reports = store.list_validation_reports(migration.id)
        assert [r.id for r in reports] == [newer.id, older.id]


# ── Tests: JSON Persistence ───────────────────────────────────────────────


class TestJsonFileStore:

    def test_round_trips_tables(self, tmp_path):
        path = tmp_path / "data" / "store.json"
        store = JsonFileStore(str(path))
        migration = _create(store)
        store.update_migration(migration.id, status=MigrationStatus.COMPLETED, progress_percentage=100)
        store.add_log(migration.id, "Migration completed", details={"progress": 100})
        store.add_validation_report(
            migration.id, "row_count", {"totalRows": 1}, {"totalRows": 1}, True
        )

        reloaded = JsonFileStore(str(path))
        restored = reloaded.get_migration(migration.id)

        assert restored.status == MigrationStatus.COMPLETED
        assert restored.progress_percentage == 100
        assert restored.created_at == migration.created_at
        assert reloaded.list_logs(migration.id)[0].details == {"progress": 100}
        assert reloaded.list_validation_reports(migration.id)[0].is_valid is True

    def test_writes_valid_json(self, tmp_path):
        path = tmp_path / "store.json"
        store = JsonFileStore(str(path))
        _create(store)

        data = json.loads(path.read_text())
        assert set(data) == {"migrations", "migration_logs", "validation_reports"}
        assert len(data["migrations"]) == 1

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json")

        with pytest.raises(StoreError, match="Corrupt"):
            JsonFileStore(str(path))

    def test_failed_snapshot_rolls_back(self, tmp_path, monkeypatch):
        path = tmp_path / "store.json"
        store = JsonFileStore(str(path))
        migration = _create(store)
        store.add_log(migration.id, "Migration dry run started")
        updated_at = migration.updated_at

        def disk_full():
            raise OSError("disk full")

        monkeypatch.setattr(store, "_after_write", disk_full)

        with pytest.raises(StoreError, match="disk full"):
            _create(store, name="lost")
        with pytest.raises(StoreError):
            store.update_migration(migration.id, status=MigrationStatus.RUNNING, progress_percentage=14)
        with pytest.raises(StoreError):
            store.add_log(migration.id, "Connecting to source database")
        with pytest.raises(StoreError):
            store.add_validation_report(migration.id, "row_count")

        assert [m.id for m in store.list_migrations()] == [migration.id]
        assert store.get_migration(migration.id).status == MigrationStatus.PENDING
        assert store.get_migration(migration.id).progress_percentage == 0
        assert store.get_migration(migration.id).updated_at == updated_at
        assert len(store.list_logs(migration.id)) == 1
        assert store.list_validation_reports(migration.id) == []
        assert store.to_dict() == JsonFileStore(str(path)).to_dict()


def test_create_store_selects_backend(tmp_path):
    assert type(create_store()) is MigrationStore
    assert isinstance(create_store(str(tmp_path / "s.json")), JsonFileStore)
