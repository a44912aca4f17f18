import logging

from tiletrace.logging_config import LOG_LEVEL_ENV, level_from_env, setup_logging


def test_level_from_env(monkeypatch):
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    assert level_from_env() == logging.INFO

    monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
    assert level_from_env() == logging.DEBUG

    monkeypatch.setenv(LOG_LEVEL_ENV, "chatty")
    assert level_from_env(default=logging.WARNING) == logging.WARNING


def test_setup_logging_does_not_duplicate_handlers(tmp_path):
    log_file = tmp_path / "tiletrace.log"
    setup_logging(logging.DEBUG)
    setup_logging(logging.DEBUG, log_file=str(log_file))

    logger = logging.getLogger("tiletrace")
    assert len(logger.handlers) == 2
    assert log_file.exists()
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def test_setup_logging_reads_level_from_env(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "WARNING")
    assert setup_logging() == logging.WARNING

    logger = logging.getLogger("tiletrace")
    assert logger.level == logging.WARNING
    # an explicit level wins over the environment
    assert setup_logging(logging.DEBUG) == logging.DEBUG
    assert logger.level == logging.DEBUG
    logger.handlers.clear()
