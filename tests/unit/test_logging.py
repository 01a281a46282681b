"""Tests for PatientFlow logging setup and store logging."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from patientflow.core.errors import DuplicateRecordError, InvalidCredentialsError
from patientflow.runtime.logging import (
    LOGGER_NAMESPACE,
    ConsoleFormatter,
    JSONLFormatter,
    get_log_file,
    get_logger,
    setup_logging,
)
from patientflow.runtime.session import Session
from patientflow.runtime.store import EntityStore


def _read_entries(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def _record(level: int = logging.INFO, **attrs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="patientflow.store",
        level=level,
        pathname="store.py",
        lineno=12,
        msg="Updated Patient record",
        args=(),
        exc_info=None,
    )
    for name, value in attrs.items():
        setattr(record, name, value)
    return record


class TestSetupLogging:
    def test_console_only(self):
        assert setup_logging(None) is None
        assert get_log_file() is None

        handlers = logging.getLogger(LOGGER_NAMESPACE).handlers
        assert len(handlers) == 1

    def test_file_logging_writes_store_events(self, tmp_path: Path):
        log_dir = setup_logging(tmp_path / "logs", level=logging.DEBUG)
        assert log_dir == tmp_path / "logs"
        assert get_log_file() == tmp_path / "logs" / "patientflow.log"

        store = EntityStore("Patient")
        store.create({"name": "Alice"})

        entries = _read_entries(get_log_file())

        assert entries[0]["message"] == "PatientFlow logging initialized"
        assert entries[0]["component"] == "App"
        created = [e for e in entries if e["message"] == "Created Patient record"][0]
        assert created["component"] == "Store"
        assert created["level"] == "DEBUG"
        assert created["entity"] == "Patient"
        assert created["operation"] == "create"
        assert created["record_id"] == "patient-1000"
        assert "context" not in created

    def test_update_fields_go_under_context(self, tmp_path: Path):
        setup_logging(tmp_path, level=logging.DEBUG)
        store = EntityStore("Document", [{"id": "d1"}])

        store.update("d1", {"status": "signed", "author": "Wilson"})

        entries = _read_entries(get_log_file())
        seeded = [e for e in entries if e.get("operation") == "seed"][0]
        updated = [e for e in entries if e.get("operation") == "update"][0]
        assert seeded["context"] == {"count": 1}
        assert updated["record_id"] == "d1"
        assert updated["context"] == {"fields": ["author", "status"]}

    def test_rejected_login_is_a_warning(self, tmp_path: Path):
        setup_logging(tmp_path)

        with pytest.raises(InvalidCredentialsError):
            Session().login({"email": "a@b.com"})

        rejected = _read_entries(get_log_file())[-1]
        assert rejected["level"] == "WARNING"
        assert rejected["component"] == "Session"
        assert rejected["operation"] == "login"
        assert rejected["source"]["line"] > 0

    def test_level_filters_debug(self, tmp_path: Path):
        setup_logging(tmp_path, level=logging.INFO)
        EntityStore("Patient").create({"name": "Alice"})

        messages = [e["message"] for e in _read_entries(get_log_file())]
        assert "Created Patient record" not in messages

    def test_repeated_setup_replaces_handlers(self, tmp_path: Path):
        setup_logging(tmp_path)
        setup_logging(tmp_path)
        assert len(logging.getLogger(LOGGER_NAMESPACE).handlers) == 2


class TestStoreLogging:
    def test_overwrite_is_logged(self, caplog: pytest.LogCaptureFixture):
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAMESPACE)
        store = EntityStore("Patient", [{"id": "p1"}])

        store.create({"id": "p1", "name": "Again"})

        overwrite = [r for r in caplog.records if r.getMessage() == "Overwrote Patient record"][0]
        assert overwrite.operation == "overwrite"
        assert overwrite.record_id == "p1"

    def test_update_and_delete_logged(self, caplog: pytest.LogCaptureFixture):
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAMESPACE)
        store = EntityStore("Document", [{"id": "d1"}])

        store.update("d1", {"status": "signed"})
        store.delete("d1")

        assert "Updated Document record" in caplog.messages
        assert "Deleted Document record" in caplog.messages

    def test_refused_insert_logs_nothing(self, caplog: pytest.LogCaptureFixture):
        store = EntityStore("Patient", [{"id": "p1"}])
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAMESPACE)

        with pytest.raises(DuplicateRecordError):
            store.insert({"id": "p1"})

        assert caplog.messages == []


class TestFormatters:
    def test_jsonl_event_fields_and_source(self):
        record = _record(
            logging.WARNING,
            component="Store",
            entity="Patient",
            operation="update",
            record_id="p1",
        )

        entry = json.loads(JSONLFormatter().format(record))

        assert entry["component"] == "Store"
        assert entry["entity"] == "Patient"
        assert entry["operation"] == "update"
        assert entry["record_id"] == "p1"
        assert entry["source"] == {"file": "store.py", "line": 12}
        assert entry["timestamp"].endswith("Z")

    def test_jsonl_omits_missing_event_fields(self):
        entry = json.loads(JSONLFormatter().format(_record(entity=None)))

        assert "entity" not in entry
        assert "source" not in entry
        assert entry["component"] == "App"

    def test_console_shows_entity_operation_and_id(self):
        record = _record(component="Store", entity="Patient", operation="update", record_id="p1")

        line = ConsoleFormatter().format(record)

        assert "[Store]" in line
        assert "Patient.update p1: Updated Patient record" in line

    def test_console_labels_warnings(self):
        line = ConsoleFormatter().format(_record(logging.WARNING, component="Session"))
        assert "WARNING" in line

    def test_get_logger_is_cached(self):
        assert get_logger("Store") is get_logger("Store")
        assert get_logger("Store").name == "patientflow.store"
