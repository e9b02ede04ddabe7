import logging

from shelfwise.logging_config import PiiRedactionFilter, _coerce_level, configure_logging


def _record(msg, *args):
    return logging.LogRecord('shelfwise.test', logging.INFO, __file__, 1, msg, args, None)


def test_redaction_masks_emails_and_secrets():
    record = _record('Adjusted by %s with token=%s', 'alice@example.com', 'abc123')

    assert PiiRedactionFilter().filter(record) is True
    assert record.getMessage() == 'Adjusted by [REDACTED_EMAIL] with token=[REDACTED]'


def test_redaction_masks_bearer_tokens():
    record = _record('Authorization header Bearer eyJhbGciOi.J9')
    PiiRedactionFilter().filter(record)

    assert 'eyJ' not in record.getMessage()


def test_coerce_level():
    assert _coerce_level('debug') == logging.DEBUG
    assert _coerce_level(logging.ERROR) == logging.ERROR
    assert _coerce_level('not-a-level') == logging.INFO
    assert _coerce_level(None) == logging.INFO


def test_configure_logging_installs_redaction(app):
    configure_logging(app)

    root = logging.getLogger()
    assert root.handlers
    assert all(any(isinstance(f, PiiRedactionFilter) for f in h.filters) for h in root.handlers)
    assert logging.getLogger('werkzeug').level == logging.WARNING
