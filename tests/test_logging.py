from __future__ import annotations

import logging

from pathlib import Path

from promptshape.logging import setup_file_logger


def test_file_logger_reuses_handler_per_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "render.log"
    logger = setup_file_logger(log_file, name="promptshape.test_logging")
    try:
        again = setup_file_logger(
            log_file, name="promptshape.test_logging", level=logging.DEBUG
        )
        assert again is logger
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.DEBUG

        logger.debug("rendered %s", "greet")
        logger.handlers[0].flush()
        assert "rendered greet" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            handler.close()
