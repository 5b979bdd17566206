import io
import logging
from unittest.mock import patch

from csv_i18n.diagnostics import error, report_diagnostics, warning
from csv_i18n.logging_config import LOGGER_NAME, TqdmLoggingHandler, setup_logger


def test_setup_logger_configures_package_logger(tmp_path):
    log_file = tmp_path / 'logs' / 'csv_i18n.log'

    logger = setup_logger('debug', str(log_file), True)

    assert logger.name == LOGGER_NAME
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert [type(handler) for handler in logger.handlers] == [logging.FileHandler, TqdmLoggingHandler]
    assert log_file.exists()


def test_setup_logger_does_not_duplicate_handlers():
    setup_logger('INFO', None, True)
    logger = setup_logger('WARNING', None, True)

    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_unknown_level_falls_back_to_info():
    assert setup_logger('chatty', None, False).level == logging.INFO


def test_tqdm_handler_writes_through_tqdm():
    logger = setup_logger('INFO', None, True)

    with patch('csv_i18n.logging_config.tqdm.write') as mock_write:
        logging.getLogger('csv_i18n.emitters').info("generated en.ts")

    mock_write.assert_called_once()
    assert mock_write.call_args[0][0].endswith("INFO - generated en.ts")


def test_report_diagnostics_logs_at_each_level(caplog):
    logger = logging.getLogger('csv_i18n.test')
    with caplog.at_level(logging.WARNING, logger='csv_i18n'):
        count = report_diagnostics([warning("first"), error("second", 'a.csv', 3)], logger)

    assert count == 2
    assert [(record.levelno, record.getMessage()) for record in caplog.records] == [
        (logging.WARNING, "first"),
        (logging.ERROR, "second"),
    ]


def test_tqdm_handler_writes_to_its_stream():
    stream = io.StringIO()
    handler = TqdmLoggingHandler(stream)
    handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))

    handler.handle(logging.makeLogRecord({'levelno': logging.WARNING, 'levelname': 'WARNING',
                                          'msg': "skipped broken.csv"}))

    assert stream.getvalue() == "WARNING - skipped broken.csv\n"
