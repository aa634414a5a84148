"""Tests for rematch.services.failure_log."""

import logging

from sqlalchemy.exc import OperationalError

from rematch.services.failure_log import FailureLog, failure_log, report_failure


class TestFailureLog:
    def test_record_fields(self):
        log = FailureLog()
        entry = log.record("buyers.prompt.write", ValueError("boom"), buyer_id="b-1")

        assert log.recent() == [entry]
        assert entry.source == "buyers.prompt.write"
        assert entry.error_type == "ValueError"
        assert entry.message == "boom"
        assert entry.buyer_id == "b-1"
        assert entry.occurred_at.tzinfo is not None
        assert entry.to_dict()["occurred_at"] == entry.occurred_at.isoformat()

    def test_recent_filters_by_source_and_buyer(self):
        log = FailureLog()
        log.record("buyers.update", RuntimeError("a"), buyer_id="b-1")
        log.record("settings.prompt.read", RuntimeError("b"))
        log.record("buyers.update", RuntimeError("c"), buyer_id="b-2")

        assert [e.message for e in log.recent(source="buyers.update")] == ["c", "a"]
        assert [e.message for e in log.recent(buyer_id="b-1")] == ["a"]
        assert [e.message for e in log.recent(limit=2)] == ["c", "b"]

    def test_counts_survive_eviction(self):
        log = FailureLog(max_records=3)
        for i in range(5):
            log.record("buyers.list", RuntimeError(f"err-{i}"))
        log.record("settings.prompt.apply_all", RuntimeError("x"))

        assert len(log) == 3
        assert log.recent()[-1].message == "err-3"
        assert log.counts() == {"buyers.list": 5, "settings.prompt.apply_all": 1}

    def test_clear(self):
        log = FailureLog()
        log.record("buyers.create", RuntimeError("a"))
        log.clear()
        assert len(log) == 0
        assert log.counts() == {}


def test_report_failure_logs_and_records(caplog):
    failure_log.clear()
    err = OperationalError("UPDATE buyers", {}, Exception("database is locked"))

    with caplog.at_level(logging.ERROR, logger="rematch.services.failure_log"):
        report_failure("buyers.prompt.reset", err, buyer_id="b-9")

    assert "buyers.prompt.reset failed for buyer b-9" in caplog.text
    assert caplog.records[-1].exc_info is not None
    recorded = failure_log.recent(source="buyers.prompt.reset")
    assert recorded[0].error_type == "OperationalError"
    assert recorded[0].buyer_id == "b-9"
    failure_log.clear()
