"""Unit tests for request-id stamping and operation timing in the app logger."""
import logging

import pytest

from learntrack.utils.logger import (
    REQUEST_ID,
    RequestIdFilter,
    bind_request_id,
    configure_logging,
    log_operation,
    unbind_request_id,
)


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []
        self.addFilter(RequestIdFilter())

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def captured():
    logger = configure_logging()
    handler = _ListHandler()
    logger.addHandler(handler)
    yield logger, handler
    logger.removeHandler(handler)


@pytest.mark.unit
class TestRequestId:
    def test_bind_and_unbind(self):
        rid, token = bind_request_id("abc-123")
        assert rid == "abc-123"
        assert REQUEST_ID.get() == "abc-123"
        unbind_request_id(token)
        assert REQUEST_ID.get() == "-"

    def test_generated_when_missing(self):
        rid, token = bind_request_id(None)
        try:
            assert len(rid) == 36
        finally:
            unbind_request_id(token)

    def test_records_carry_the_bound_id(self, captured):
        logger, handler = captured
        _, token = bind_request_id("req-7")
        try:
            logger.warning("inside request")
        finally:
            unbind_request_id(token)
        logger.warning("outside request")
        assert [r.request_id for r in handler.records] == ["req-7", "-"]


@pytest.mark.unit
class TestLogOperation:
    def test_success_is_logged(self, captured):
        logger, handler = captured
        with log_operation(logger, "seed demo user"):
            pass
        assert handler.records[-1].levelno == logging.INFO
        assert handler.records[-1].getMessage().startswith("seed demo user ok duration_ms=")

    def test_failure_is_logged_and_reraised(self, captured):
        logger, handler = captured
        with pytest.raises(RuntimeError):
            with log_operation(logger, "seed demo user"):
                raise RuntimeError("boom")
        assert handler.records[-1].levelno == logging.ERROR
        assert handler.records[-1].exc_info is not None
