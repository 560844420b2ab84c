from __future__ import annotations

import logging

from pomgen.logging import configure_logging, get_logger, set_debug


def test_get_logger_uses_pomgen_hierarchy() -> None:
    assert get_logger().name == "pomgen"
    assert get_logger("orchestrator").name == "pomgen.orchestrator"


def test_configure_logging_does_not_stack_handlers(tmp_path) -> None:
    configure_logging()
    logger = configure_logging(log_file=tmp_path / "run.log")

    assert len(logger.handlers) == 2
    assert logger.level == logging.INFO
    assert logger.propagate is False


def test_set_debug_updates_handlers() -> None:
    logger = configure_logging()

    set_debug(True)
    assert logger.level == logging.DEBUG
    assert all(handler.level == logging.DEBUG for handler in logger.handlers)

    set_debug(False)
    assert logger.level == logging.INFO
