import json
import logging

from stockflow.core.logging_config import PerformanceFilter, StructuredFormatter, setup_logging


def make_record(**attrs):
    record = logging.LogRecord("stockflow.test", logging.INFO, __file__, 1, "done", None, None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


def test_duration_is_reported_in_milliseconds():
    record = make_record(duration=0.25, extra_fields={"path": "/"})
    PerformanceFilter().filter(record)
    out = json.loads(StructuredFormatter().format(record))
    assert out["performance"] == {"duration_ms": 250.0}
    assert out["custom"] == {"path": "/"}


def test_no_performance_block_without_duration():
    record = make_record()
    PerformanceFilter().filter(record)
    out = json.loads(StructuredFormatter().format(record))
    assert "performance" not in out


def test_request_logs_carry_duration(client, caplog):
    caplog.set_level(logging.INFO, logger="stockflow.core.logging_config")
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.headers["X-Request-ID"]
    completed = [r for r in caplog.records if r.getMessage().startswith("Request completed")]
    assert completed
    assert completed[-1].duration >= 0
    assert completed[-1].extra_fields["status_code"] == 200


def test_file_logging_writes_json_lines(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    log_file = tmp_path / "stockflow.log"
    try:
        setup_logging("stockflow", level="INFO", enable_console=False, enable_file=True, log_file=str(log_file))
        logging.getLogger("stockflow.test").info("Report built", extra={"duration": 0.5})
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)

    lines = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert lines[0]["message"] == "Logging initialized"
    assert lines[-1]["message"] == "Report built"
    assert lines[-1]["performance"] == {"duration_ms": 500.0}
