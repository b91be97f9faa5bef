"""
Logging configuration using Loguru.

Console output is human-readable. The optional file sink writes one JSON
record per line, so the structured ``extra`` fields that services attach
(operation, project_id, doc_type, ...) survive for later inspection.
"""

import sys
from pathlib import Path

from loguru import logger

from pmgraph.config import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[module]}:{function}:{line} - {message}"
FILE_NAME = "pmgraph_{time:YYYY-MM-DD}.log"


def setup_logging(config: LoggingConfig | None = None, **overrides) -> None:
    """
    Configure Loguru sinks from the logging section of the config.

    Args:
        config: Logging configuration (defaults when omitted)
        **overrides: Field overrides applied on top, e.g. ``level="DEBUG"``
    """
    config = (config or LoggingConfig()).model_copy(update=overrides)

    logger.remove()
    # records logged without get_logger still render {extra[module]}
    logger.configure(extra={"module": "pmgraph"})

    logger.add(
        sys.stderr,
        level=config.level,
        format=CONSOLE_FORMAT,
        colorize=True,
        serialize=False,
    )

    if config.log_to_file:
        log_path = Path(config.log_dir).expanduser()
        log_path.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path / FILE_NAME,
            level=config.level,
            format=FILE_FORMAT,
            rotation=config.file_rotation,
            retention=config.file_retention,
            compression=config.compression,
            serialize=config.serialize,
            enqueue=True,
        )


def get_logger(name: str):
    """Get a logger bound to a module name."""
    return logger.bind(module=name)
