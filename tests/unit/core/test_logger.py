import logging

from replica_dashboard.core.logger import RedactingFilter, get_logger


def _record(msg: str) -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, (), None)


def test_redacting_filter_masks_sensitive_messages():
    record = _record("login with Password=hunter2")

    assert RedactingFilter(["password"]).filter(record) is True
    assert record.getMessage() == "[REDACTED SENSITIVE LOG CONTENT]"


def test_redacting_filter_leaves_other_messages():
    record = _record("stream_connected")

    RedactingFilter(["password"]).filter(record)

    assert record.getMessage() == "stream_connected"


def test_get_logger_propagates(caplog):
    logger = get_logger("replica_dashboard.test")
    with caplog.at_level(logging.INFO, logger="replica_dashboard.test"):
        logger.info("something_happened", extra={"replica_id": 3})

    (record,) = caplog.records
    assert record.getMessage() == "something_happened"
    assert record.replica_id == 3
