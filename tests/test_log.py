# tests/test_log.py
import logging

from refap.log import StructuredFormatter, get_logger, log_with_context


def test_structured_formatter_appends_context():
    record = logging.LogRecord("refap.test", logging.INFO, __file__, 1, "index rebuilt", None, None)
    record.extra_data = {"entries": 7, "lexicon": "2025.3"}
    line = StructuredFormatter().format(record)
    assert "level=INFO" in line
    assert "message=index rebuilt" in line
    assert line.endswith("entries=7 lexicon=2025.3")


def test_get_logger_configures_once():
    a = get_logger("refap.test.once")
    b = get_logger("refap.test.once")
    assert a is b
    assert len(a.handlers) == 1


def test_log_with_context(caplog):
    logger = logging.getLogger("refap.test.ctx")
    with caplog.at_level(logging.INFO, logger="refap.test.ctx"):
        log_with_context(logger, logging.INFO, "rebuilt", entries=3)
    assert caplog.records[-1].extra_data == {"entries": 3}
